"""Bank file generation and upload payloads."""
from typing import Literal

from pydantic import BaseModel

BankName = Literal["BPI", "BDO", "Metrobank", "PNB", "RCBC", "Unionbank"]
FileFormat = Literal["csv", "txt", "excel", "fixed_width"]


class BankFileGenerate(BaseModel):
    period_id: int
    bank_name: BankName
    file_format: FileFormat = "csv"


class BankFileUpload(BaseModel):
    confirmation_method: Literal["auto", "manual"] = "manual"
