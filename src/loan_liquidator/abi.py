"""
Minimal ABI fragments for the lending platform and its token.
"""

_LOAN_COMPONENTS = [
    {"name": "id", "type": "uint256"},
    {"name": "borrower", "type": "address"},
    {"name": "lender", "type": "address"},
    {"name": "amount", "type": "uint256"},
    {"name": "collateralAmount", "type": "uint256"},
    {"name": "interest", "type": "uint256"},
    {"name": "startTime", "type": "uint256"},
    {"name": "duration", "type": "uint256"},
    {"name": "active", "type": "bool"},
    {"name": "funded", "type": "bool"},
    {"name": "ipfsHash", "type": "string"},
    {"name": "loanAgreementHash", "type": "bytes32"},
]

LENDING_PLATFORM_ABI = [
    {
        "inputs": [],
        "name": "loanCounter",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        # public mapping getter, returns the struct members as a flat tuple
        "inputs": [{"name": "", "type": "uint256"}],
        "name": "loans",
        "outputs": _LOAN_COMPONENTS,
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "getEthPrice",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"name": "_loanId", "type": "uint256"}],
        "name": "liquidate",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]

LENDING_TOKEN_ABI = [
    {
        "inputs": [{"name": "account", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "spender", "type": "address"},
        ],
        "name": "allowance",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "spender", "type": "address"},
            {"name": "value", "type": "uint256"},
        ],
        "name": "approve",
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "faucet",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]
