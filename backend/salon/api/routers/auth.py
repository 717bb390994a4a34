import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.security import OAuth2PasswordRequestForm

from salon.db import RecordStore, get_db
from salon.models import ROLE_STAFF, USERS, User
from salon.schemas import RegisterRequest, SessionState, Token
from salon.services.auth_service import AuthStub, get_auth, get_current_user, token_for

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=Token)
async def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    auth: AuthStub = Depends(get_auth),
):
    # form_data.username 에 이메일이 들어온다
    result = await auth.sign_in_with_password(form_data.username, form_data.password)
    if not result.ok:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=result.error.message,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return Token(access_token=token_for(result.user), user=result.user)


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
async def register_user(
    user_in: RegisterRequest,
    db: RecordStore = Depends(get_db),
    auth: AuthStub = Depends(get_auth),
):
    """
    가입 -> users 테이블에 프로필 생성 (role='staff').
    두 단계가 분리되어 있어서 프로필 생성이 실패하면 세션만 남을 수 있다.
    """
    # 프로필은 email 로도 찾으므로 같은 email 의 users row 가 둘이면 안 된다
    existing = await db.from_(USERS).select("id").eq("email", user_in.email).single()
    if existing is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    result = await auth.sign_up(user_in.email, user_in.password)
    if not result.ok:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.error.message)

    profile = await db.from_(USERS).insert(
        [{"email": user_in.email, "name": user_in.name, "role": ROLE_STAFF, "active": True}]
    )
    # 프로필 조회가 세션 id 로 이뤄지므로 id 를 세션 사용자 것으로 맞춘다
    await db.from_(USERS).update({"id": result.user.id}).eq("id", profile["id"])
    logger.info("created profile for %s", user_in.email)

    return Token(access_token=token_for(result.user), user=result.user)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(auth: AuthStub = Depends(get_auth)):
    await auth.sign_out()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/session", response_model=SessionState)
async def get_session(auth: AuthStub = Depends(get_auth)):
    return SessionState(session=await auth.get_session())


@router.get("/me", response_model=User)
async def get_my_info(current_user: User = Depends(get_current_user)):
    """현재 로그인한 사용자의 프로필 (users row)"""
    return current_user
