from setuptools import setup, find_packages

setup(
    name="loan-liquidator",
    version="1.0.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "web3>=7.0.0",
        "eth-account>=0.13.0",
        "eth-utils>=4.0.0",
        "hexbytes>=1.0.0",
        "aiohttp>=3.9.0",
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        "python-json-logger>=3.1.0",
        "prometheus-client>=0.17.0",
        "click>=8.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.23.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "loan-liquidator = loan_liquidator.main:cli",
        ],
    },
    python_requires=">=3.9",
    description="Liquidation bot for a peer-to-peer collateralized lending platform",
)
