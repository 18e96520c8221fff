# nocturna/models/api/auth_request.py
from pydantic import BaseModel

# Fields default to "" so missing and blank values get the same message


class RegisterRequest(BaseModel):
    email: str = ""
    password: str = ""
    name: str = ""


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""
