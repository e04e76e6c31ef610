from fastapi import APIRouter, Depends, HTTPException, Header
from pydantic import BaseModel
from sqlmodel import Session, select
from typing import Optional
from videoai.core.db import get_session
from videoai.models import User, AuthToken
from videoai.services.security import hash_password, verify_password, issue_token, bearer_token, get_current_user

router = APIRouter()

class SignupRequest(BaseModel):
    name: str
    email: str
    password: str

class LoginRequest(BaseModel):
    email: str
    password: str

@router.post("/signup", status_code=201)
def signup(req: SignupRequest, session: Session = Depends(get_session)):
    """create an account; the client logs in separately"""
    email = req.email.strip().lower()
    if not email or "@" not in email:
        raise HTTPException(status_code=400, detail="A valid email is required")
    if len(req.password) < 8:
        raise HTTPException(status_code=400, detail="Password must be at least 8 characters")

    existing = session.exec(select(User).where(User.email == email)).first()
    if existing:
        raise HTTPException(status_code=409, detail="An account with this email already exists")

    user = User(email=email, name=req.name.strip(), password_hash=hash_password(req.password))
    session.add(user)
    session.commit()
    session.refresh(user)
    return {"user": user.to_public()}

@router.post("/login")
def login(req: LoginRequest, session: Session = Depends(get_session)):
    user = session.exec(select(User).where(User.email == req.email.strip().lower())).first()
    if not user or not verify_password(req.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    token = issue_token(session, user)
    return {"token": token.token, "user": user.to_public()}

@router.post("/logout")
def logout(
    authorization: Optional[str] = Header(default=None),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """revoke the token the request was made with"""
    token = session.get(AuthToken, bearer_token(authorization))
    if token:
        session.delete(token)
        session.commit()
    return {"message": "Logged out"}
