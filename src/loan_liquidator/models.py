"""
Core data models for loan records and scan results.

`Loan` is validated at the contract boundary: raw call results are decoded
through `Loan.from_contract_result`, which raises `DecodingError` instead of
letting malformed data reach the liquidation math.
"""

from typing import Any, List, Mapping, Optional, Sequence, Union
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .types import DecodingError, LoanOutcome
from .utils import is_zero_address, normalize_address, validate_address


# Python field name -> Solidity struct member, in declaration order
LOAN_FIELDS = (
    ("id", "id"),
    ("borrower", "borrower"),
    ("lender", "lender"),
    ("amount", "amount"),
    ("collateral_amount", "collateralAmount"),
    ("interest", "interest"),
    ("start_time", "startTime"),
    ("duration", "duration"),
    ("active", "active"),
    ("funded", "funded"),
    ("ipfs_hash", "ipfsHash"),
    ("loan_agreement_hash", "loanAgreementHash"),
)


class Loan(BaseModel):
    """One lending agreement as recorded by the lending platform"""

    model_config = ConfigDict(frozen=True, strict=True)

    id: int = Field(ge=0)
    borrower: str
    lender: str
    amount: int = Field(ge=0)
    collateral_amount: int = Field(ge=0)
    interest: int = Field(ge=0)
    start_time: int = Field(ge=0)
    duration: int = Field(ge=0)
    active: bool
    funded: bool
    ipfs_hash: str
    loan_agreement_hash: str

    @field_validator("borrower", "lender", mode="before")
    @classmethod
    def _checksum_address(cls, value: Any) -> Any:
        if not validate_address(value):
            raise ValueError(f"invalid address: {value!r}")
        return normalize_address(value)

    @field_validator("loan_agreement_hash", mode="before")
    @classmethod
    def _hex_hash(cls, value: Any) -> Any:
        if isinstance(value, (bytes, bytearray)):
            raw = bytes(value)
        elif isinstance(value, str):
            try:
                raw = bytes.fromhex(value[2:] if value.startswith("0x") else value)
            except ValueError:
                raise ValueError(f"invalid hex hash: {value!r}")
        else:
            raise ValueError(f"expected bytes32, got {type(value).__name__}")
        if len(raw) != 32:
            raise ValueError(f"expected 32 bytes, got {len(raw)}")
        return "0x" + raw.hex()

    @property
    def is_eligible(self) -> bool:
        """Only active, funded loans are candidates for liquidation"""
        return self.active and self.funded

    @property
    def exists(self) -> bool:
        """Unset mapping slots decode as an all-zero record"""
        return self.id != 0 and not is_zero_address(self.borrower)

    @classmethod
    def from_contract_result(cls, raw: Union[Sequence[Any], Mapping[str, Any]]) -> "Loan":
        """
        Decode the output of the `loans(uint256)` getter.

        Accepts either the positional tuple web3 returns or a mapping keyed
        by the Solidity member names.
        """
        if isinstance(raw, Mapping):
            try:
                values = {name: raw[member] for name, member in LOAN_FIELDS}
            except KeyError as e:
                raise DecodingError(f"Loan record is missing member {e.args[0]!r}")
        elif isinstance(raw, (list, tuple)):
            if len(raw) != len(LOAN_FIELDS):
                raise DecodingError(
                    f"Loan record has {len(raw)} members, expected {len(LOAN_FIELDS)}"
                )
            values = {name: value for (name, _), value in zip(LOAN_FIELDS, raw)}
        else:
            raise DecodingError(f"Unexpected loan record type: {type(raw).__name__}")

        try:
            return cls(**values)
        except ValidationError as e:
            fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err["loc"])
            raise DecodingError(f"Malformed loan record ({fields})") from e


@dataclass
class LoanEvaluation:
    """Outcome of one loan within a scan"""
    loan_id: int
    outcome: LoanOutcome
    collateral_value: Optional[int] = None
    threshold: Optional[int] = None
    collateral_ratio: Optional[Decimal] = None
    transaction_hash: Optional[str] = None
    reason: Optional[str] = None


@dataclass
class ScanReport:
    """Summary of a complete scan cycle"""
    started_at: datetime
    finished_at: Optional[datetime] = None
    loan_count: int = 0
    aborted: bool = False
    error: Optional[str] = None
    evaluations: List[LoanEvaluation] = field(default_factory=list)

    def with_outcome(self, outcome: LoanOutcome) -> List[LoanEvaluation]:
        return [e for e in self.evaluations if e.outcome is outcome]

    @property
    def liquidated(self) -> List[int]:
        return [e.loan_id for e in self.with_outcome(LoanOutcome.LIQUIDATED)]

    @property
    def failed(self) -> List[int]:
        return [e.loan_id for e in self.with_outcome(LoanOutcome.LIQUIDATION_FAILED)]

    @property
    def duration_seconds(self) -> float:
        if self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()
