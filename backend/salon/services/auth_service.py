import asyncio
import inspect
import json
import logging
from datetime import datetime, timedelta, timezone
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Optional, Tuple, Union

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import ValidationError

from salon.config import ACCESS_TOKEN_EXPIRE_MINUTES, ALGORITHM, SECRET_KEY
from salon.db import RecordStore, get_db
from salon.models import ROLE_ADMIN, USERS, User
from salon.schemas import AuthError, AuthResponse, Session, SessionUser

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")

# 로그인 사용자를 저장하는 키 (브라우저 localStorage 의 키에 해당)
SESSION_STORAGE_KEY = "mockUser"

NEW_USER_ID = "mock-new-user-id"
INVALID_CREDENTIALS = "Invalid credentials"


def verify_password(plain_password, password_hash):
    return pwd_context.verify(plain_password, password_hash)

def hash_password(password):

    if not isinstance(password, (str, bytes)):
        raise TypeError("Password must be a string or bytes.")

    return pwd_context.hash(password)


# 데모 계정 두 개만 로그인 가능 (email -> (user id, password hash))
DEMO_ACCOUNTS: Dict[str, Tuple[str, str]] = {
    "admin@salon.com": ("mock-admin-id", hash_password("admin123")),
    "staff@salon.com": ("mock-staff-id", hash_password("staff123")),
}


class AuthEvent(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"


AuthListener = Callable[[AuthEvent, Optional[Session]], Union[None, Awaitable[None]]]


class SessionStorage:
    """
    로그인 사용자 한 명을 보관하는 key-value 슬롯.
    path 가 있으면 JSON 파일에 기록해서 재시작 후에도 복원되고,
    없으면 프로세스 메모리에만 둔다.
    """

    def __init__(self, path: Optional[str] = None):
        self._path = Path(path) if path else None
        self._memory: Dict[str, str] = {}

    def _load(self) -> Dict[str, str]:
        if self._path is None:
            return dict(self._memory)
        if not self._path.exists():
            return {}
        try:
            return json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("session storage %s unreadable, starting empty", self._path)
            return {}

    def _save(self, data: Dict[str, str]) -> None:
        if self._path is None:
            self._memory = data
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        if data.pop(key, None) is not None:
            self._save(data)


class Subscription:
    def __init__(self, auth: "AuthStub", listener: AuthListener):
        self._auth = auth
        self._listener = listener

    def unsubscribe(self) -> None:
        self._auth._remove_listener(self._listener)


class AuthStub:
    """
    실제 인증 서버 없이 세션 로그인을 흉내 낸다.

    상태는 signed-out / signed-in 두 가지뿐이다. 세션이 바뀔 때마다 등록된
    리스너들을 loop.call_soon 으로 한 턴 미뤄서 호출하므로, 리스너는 항상
    상태를 바꾼 호출이 끝난 다음에 실행된다.
    """

    def __init__(self, storage: Optional[SessionStorage] = None):
        self._storage = storage or SessionStorage()
        self._listeners: List[AuthListener] = []
        self._pending: set = set()
        self._backlog: List[Tuple[AuthListener, AuthEvent, Optional[Session]]] = []
        self._session: Optional[Session] = self._restore()

    def _restore(self) -> Optional[Session]:
        raw = self._storage.get_item(SESSION_STORAGE_KEY)
        if not raw:
            return None
        try:
            user = SessionUser.model_validate_json(raw)
        except ValidationError:
            logger.warning("discarding malformed cached session")
            self._storage.remove_item(SESSION_STORAGE_KEY)
            return None
        logger.info("restored session for %s", user.email)
        return Session(user=user)

    # --- 조회 / 구독 ---
    async def get_session(self) -> Optional[Session]:
        self._flush_backlog()
        return self._session

    def on_auth_state_change(self, listener: AuthListener) -> Subscription:
        """
        리스너를 등록한다. 이미 로그인 상태라면 등록 직후
        SIGNED_IN 이벤트가 한 번 (비동기로) 전달된다.
        실행 중인 이벤트 루프가 없으면 다음 async 호출 때 전달된다.
        """
        self._listeners.append(listener)
        if self._session is not None:
            self._schedule(listener, AuthEvent.SIGNED_IN, self._session)
        return Subscription(self, listener)

    def _remove_listener(self, listener: AuthListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # --- 상태 전이 ---
    async def sign_in_with_password(self, email: str, password: str) -> AuthResponse:
        self._flush_backlog()
        account = DEMO_ACCOUNTS.get(email)
        if account is None or not verify_password(password, account[1]):
            logger.info("sign-in rejected for %s", email)
            return AuthResponse(error=AuthError(message=INVALID_CREDENTIALS))

        user = SessionUser(id=account[0], email=email)
        session = self._sign_in(user)
        logger.info("signed in %s", email)
        return AuthResponse(user=user, session=session)

    async def sign_up(self, email: str, password: str) -> AuthResponse:
        self._flush_backlog()
        # 가입은 항상 성공. 프로필(users row) 생성은 호출하는 쪽 책임
        user = SessionUser(id=NEW_USER_ID, email=email)
        session = self._sign_in(user)
        logger.info("signed up %s", email)
        return AuthResponse(user=user, session=session)

    async def sign_out(self) -> AuthResponse:
        self._flush_backlog()
        self._session = None
        self._storage.remove_item(SESSION_STORAGE_KEY)
        self._emit(AuthEvent.SIGNED_OUT, None)
        logger.info("signed out")
        return AuthResponse()

    def _sign_in(self, user: SessionUser) -> Session:
        self._session = Session(user=user)
        self._storage.set_item(SESSION_STORAGE_KEY, user.model_dump_json())
        self._emit(AuthEvent.SIGNED_IN, self._session)
        return self._session

    # --- 알림 ---
    def _emit(self, event: AuthEvent, session: Optional[Session]) -> None:
        for listener in list(self._listeners):
            self._schedule(listener, event, session)

    def _schedule(self, listener: AuthListener, event: AuthEvent, session: Optional[Session]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._backlog.append((listener, event, session))
            return
        loop.call_soon(self._deliver, listener, event, session)

    def _flush_backlog(self) -> None:
        backlog, self._backlog = self._backlog, []
        for listener, event, session in backlog:
            # 보관 중에 구독 해제된 리스너는 건너뛴다
            if listener in self._listeners:
                self._schedule(listener, event, session)

    def _deliver(self, listener: AuthListener, event: AuthEvent, session: Optional[Session]) -> None:
        try:
            result = listener(event, session)
        except Exception:
            logger.exception("auth listener failed on %s", event.value)
            return
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._pending.add(task)
            task.add_done_callback(self._task_done)

    def _task_done(self, task: "asyncio.Future") -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("auth listener failed", exc_info=task.exception())


# --- 토큰 ---
def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt

def token_for(user: SessionUser) -> str:
    return create_access_token(data={"sub": user.id, "email": user.email})


# --- 의존성 ---
def get_auth(request: Request) -> AuthStub:
    return request.app.state.auth

async def get_current_session_user(
    token: str = Depends(oauth2_scheme),
    auth: AuthStub = Depends(get_auth),
) -> SessionUser:
    """
    토큰의 sub, email 이 AuthStub 의 현재 세션과 일치해야 통과.
    로그아웃 이후의 토큰은 만료 전이라도 거부된다.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise credentials_exception
    user_id = payload.get("sub")
    email = payload.get("email")
    if user_id is None:
        raise credentials_exception

    session = await auth.get_session()
    if session is None or session.user.id != user_id or session.user.email != email:
        raise credentials_exception
    return session.user

async def get_current_user(
    session_user: SessionUser = Depends(get_current_session_user),
    db: RecordStore = Depends(get_db),
    auth: AuthStub = Depends(get_auth),
) -> User:
    """
    세션 사용자의 프로필(users row, active=True)을 찾아 반환.
    프로필이 없으면 강제로 로그아웃시킨다.
    """
    profile = await (
        db.from_(USERS).select()
        .eq("id", session_user.id)
        .eq("email", session_user.email)
        .eq("active", True)
        .single()
    )
    if profile is None:
        logger.warning("no active profile for %s, forcing sign-out", session_user.id)
        await auth.sign_out()
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User profile not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return User.model_validate(profile)

async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != ROLE_ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="관리자만 사용할 수 있습니다.",
        )
    return current_user
