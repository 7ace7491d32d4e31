"""Pydantic schemas used across the backend API."""
from .auth import Token, TokenData, UserCreate, UserLogin, UserRead, compute_expiry
from .employees import EmployeeCreate, EmployeeRead

__all__ = [
    "EmployeeCreate",
    "EmployeeRead",
    "Token",
    "TokenData",
    "UserCreate",
    "UserLogin",
    "UserRead",
    "compute_expiry",
]
