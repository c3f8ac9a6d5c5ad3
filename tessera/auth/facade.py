"""
Role-agnostic authentication facade.

``AuthFacade`` composes the identity, credential, session and revocation
providers with the token codec, the secret hasher and the audit logger
into the public operations used by every role adapter:

- ``register`` / ``login`` / ``login_sso`` issue a new session lineage
- ``refresh`` rotates a session's token pair with a compare-and-swap
- ``revoke`` / ``revoke_all`` terminate sessions idempotently
- ``authenticate`` turns an access token into a ``Principal``

Every operation returns an ``AuthResult``; errors raised by the
components are converted here and nowhere else. Each register, login,
refresh and revoke call writes exactly one audit entry, whatever its
outcome.

Security considerations:
- "Unknown actor" and "wrong secret" are reported with the same error
- Raw secrets and tokens are never stored or logged; tokens are kept as
  SHA-256 digests
- A refresh token is honored at most once
"""

import logging
import unicodedata
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any

from .audit_logger import AuditLogger
from .exceptions import (
    ActorInactiveError,
    AuthError,
    AuthValidationError,
    DuplicateIdentityError,
    InvalidCredentialsError,
    SessionExpiredError,
    SessionNotFoundError,
    SessionRevokedError,
    StorageError,
    TokenMalformedError,
)
from .providers import (
    CredentialProvider,
    IdentityProvider,
    RevocationProvider,
    SessionProvider,
)
from .secret_hasher import SecretHasher
from .token_service import TokenService
from .types import (
    LOCAL_PROVIDER,
    AuditAction,
    AuditOutcome,
    AuthGrant,
    AuthResult,
    Credential,
    Identity,
    Principal,
    RevocationOutcome,
    RevocationReason,
    Role,
    Session,
    TokenPair,
    TokenPurpose,
)
from .utils import (
    hash_token,
    is_valid_email,
    new_id,
    normalize_business_key,
    parse_bearer_header,
    sanitize_user_input,
    secure_compare,
    timing_protection,
)

logger = logging.getLogger(__name__)

DEFAULT_MIN_SECRET_LENGTH = 8
MAX_DISPLAY_NAME_LENGTH = 200


class AuthFacade:
    """
    Single, role-parameterized authentication engine.

    Args:
        identities: Identity registry
        credentials: Credential store
        sessions: Session registry
        ledger: Revocation ledger
        tokens: Token codec
        hasher: Secret hasher
        audit: Fire-and-forget audit logger
        config: Engine settings:
            - roles: Closed list of role names (default: any well-formed role)
            - business_key_format: ``email`` (default) or ``any``
            - min_secret_length: Minimum local secret length (default: 8)
            - revoke_on_replay: Revoke the whole lineage when a rotated-away
              refresh token is presented (default: False)
            - stateful_authenticate: Also require a live session and an
              active actor in ``authenticate`` (default: False)
            - min_response_time: Minimum seconds a login takes (default: 0)
        clock: Callable returning the current aware UTC datetime
            (default: the token codec's clock)
    """

    def __init__(
        self,
        identities: IdentityProvider,
        credentials: CredentialProvider,
        sessions: SessionProvider,
        ledger: RevocationProvider,
        tokens: TokenService,
        hasher: SecretHasher,
        audit: AuditLogger,
        config: dict[str, Any] | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.identities = identities
        self.credentials = credentials
        self.sessions = sessions
        self.ledger = ledger
        self.tokens = tokens
        self.hasher = hasher
        self.audit = audit
        self.clock = clock or tokens.clock

        config = dict(config or {})
        roles = config.get("roles")
        self.roles = frozenset(Role.coerce(r).name for r in roles) if roles else None
        self.business_key_format = config.get("business_key_format", "email")
        self.min_secret_length = config.get("min_secret_length", DEFAULT_MIN_SECRET_LENGTH)
        self.revoke_on_replay = config.get("revoke_on_replay", False)
        self.stateful_authenticate = config.get("stateful_authenticate", False)
        self.min_response_time = config.get("min_response_time", 0.0)

    async def start(self) -> None:
        await self.audit.start()

    async def close(self) -> None:
        await self.audit.close()

    # Public operations

    async def register(
        self,
        role: Role | str,
        business_key: str,
        display_name: str,
        secret: str | None = None,
        sso_provider: str | None = None,
        sso_provider_key: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuthResult[AuthGrant]:
        """
        Register a new actor and open its first session.

        Exactly one authentication method must be given: either ``secret``
        or both ``sso_provider`` and ``sso_provider_key``. Registration is
        all-or-nothing; a failure after the identity was created removes
        everything created so far.

        Returns:
            ``AuthResult[AuthGrant]`` with the identity projection and the
            initial token pair
        """
        trail: dict[str, str] = {}
        context = self._context(
            role,
            provider=sso_provider or LOCAL_PROVIDER,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        return await self._run(
            AuditAction.REGISTER,
            AuditAction.REGISTER,
            lambda: self._register(
                role,
                business_key,
                display_name,
                secret,
                sso_provider,
                sso_provider_key,
                ip_address,
                user_agent,
                trail,
            ),
            trail,
            context,
        )

    async def login(
        self,
        role: Role | str,
        business_key: str,
        secret: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuthResult[AuthGrant]:
        """
        Log in with a local secret and open a new, independent session.

        A missing actor and a wrong secret both fail with
        ``INVALID_CREDENTIAL`` and the same message.
        """
        trail: dict[str, str] = {}
        context = self._context(
            role, provider=LOCAL_PROVIDER, ip_address=ip_address, user_agent=user_agent
        )

        async def operation() -> AuthGrant:
            async with timing_protection(self.min_response_time):
                return await self._login(
                    role, business_key, secret, ip_address, user_agent, trail
                )

        return await self._run(
            AuditAction.LOGIN, AuditAction.LOGIN, operation, trail, context
        )

    async def login_sso(
        self,
        role: Role | str,
        business_key: str,
        sso_provider: str,
        sso_provider_key: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuthResult[AuthGrant]:
        """Log in with an external provider subject instead of a secret."""
        trail: dict[str, str] = {}
        context = self._context(
            role, provider=sso_provider, ip_address=ip_address, user_agent=user_agent
        )

        async def operation() -> AuthGrant:
            async with timing_protection(self.min_response_time):
                return await self._login_sso(
                    role,
                    business_key,
                    sso_provider,
                    sso_provider_key,
                    ip_address,
                    user_agent,
                    trail,
                )

        return await self._run(
            AuditAction.LOGIN, AuditAction.LOGIN, operation, trail, context
        )

    async def refresh(
        self, refresh_token: str, role: Role | str | None = None
    ) -> AuthResult[TokenPair]:
        """
        Rotate the token pair of a session.

        Args:
            refresh_token: The session's current refresh token
            role: If given, the session must belong to this role

        Returns:
            ``AuthResult[TokenPair]`` holding a brand-new pair. The presented
            refresh token can never be used again.
        """
        trail: dict[str, str] = {}
        context = self._context(role)
        return await self._run(
            AuditAction.REFRESH,
            AuditAction.REFRESH_FAILED,
            lambda: self._refresh(refresh_token, role, trail),
            trail,
            context,
        )

    async def revoke(
        self,
        session_id: str | None = None,
        refresh_token: str | None = None,
    ) -> AuthResult[RevocationOutcome]:
        """
        Revoke one session, by ID or by one of its refresh tokens.

        Revoking an unknown or already revoked session succeeds with
        ``revoked=False``. Expired refresh tokens are accepted.
        """
        trail: dict[str, str] = {}
        context = {"by": "refresh_token" if refresh_token is not None else "session_id"}
        return await self._run(
            AuditAction.REVOKE,
            AuditAction.REVOKE,
            lambda: self._revoke(session_id, refresh_token, trail),
            trail,
            context,
        )

    async def revoke_all(self, identity_id: str) -> AuthResult[RevocationOutcome]:
        """Revoke every session of an identity (logout everywhere)."""
        trail: dict[str, str] = {"identity_id": identity_id}
        context = {"by": "identity_id"}
        return await self._run(
            AuditAction.REVOKE,
            AuditAction.REVOKE,
            lambda: self._revoke_all(identity_id, context),
            trail,
            context,
        )

    async def authenticate(
        self,
        token: str,
        role: Role | str | None = None,
        stateful: bool | None = None,
    ) -> AuthResult[Principal]:
        """
        Verify an access token for a domain service.

        Args:
            token: Raw access token or an ``Authorization`` header value
                (``Bearer <token>``)
            role: If given, the token must have been issued for this role
            stateful: Also require a live session and an active actor
                (default: the ``stateful_authenticate`` setting)

        Returns:
            ``AuthResult[Principal]``; the principal is the only state a
            domain service ever receives
        """
        try:
            principal = await self._authenticate(
                token, role, self.stateful_authenticate if stateful is None else stateful
            )
        except AuthError as e:
            logger.debug(f"Access token rejected: {e.status.value}")
            return AuthResult.failure(e)
        except Exception as e:
            return AuthResult.failure(self._internal_error("authenticate", e))
        return AuthResult.success(principal)

    # Operation bodies

    async def _register(
        self,
        role: Role | str,
        business_key: str,
        display_name: str,
        secret: str | None,
        sso_provider: str | None,
        sso_provider_key: str | None,
        ip_address: str | None,
        user_agent: str | None,
        trail: dict[str, str],
    ) -> AuthGrant:
        role_name = self._validate_role(role)
        key = self._validate_business_key(business_key)
        name = self._validate_display_name(display_name)
        provider, provider_key = self._validate_method(
            key, secret, sso_provider, sso_provider_key
        )

        if await self.identities.find_by_business_key(role_name, key) is not None:
            raise DuplicateIdentityError(
                f"Business key already registered for role '{role_name}'",
                details={"role": role_name},
            )

        now = self.clock()
        secret_hash = self.hasher.hash(secret) if provider == LOCAL_PROVIDER else None

        identity = await self.identities.create_identity(
            Identity(
                id=new_id(),
                role=role_name,
                business_key=key,
                display_name=name,
                created_at=now,
                updated_at=now,
            )
        )
        trail["identity_id"] = identity.id

        try:
            credential = await self._bind_credential(
                Credential(
                    id=new_id(),
                    identity_id=identity.id,
                    role=role_name,
                    provider=provider,
                    provider_key=provider_key,
                    secret_hash=secret_hash,
                    created_at=now,
                )
            )
            try:
                session, pair = await self._open_session(
                    identity, now, ip_address, user_agent
                )
            except Exception:
                await self._compensate(
                    self.credentials.retire_credential(credential.id),
                    f"credential {credential.id}",
                )
                raise
        except Exception:
            await self._compensate(
                self.identities.remove_identity(identity.id), f"identity {identity.id}"
            )
            trail.pop("identity_id", None)
            raise

        trail["session_id"] = session.id
        logger.info(f"Registered identity {identity.id} in role '{role_name}'")
        return AuthGrant(identity=identity.projection(), tokens=pair, session_id=session.id)

    async def _login(
        self,
        role: Role | str,
        business_key: str,
        secret: str,
        ip_address: str | None,
        user_agent: str | None,
        trail: dict[str, str],
    ) -> AuthGrant:
        role_name = self._validate_role(role)
        key = self._require_business_key(business_key)
        if not secret or not isinstance(secret, str):
            raise AuthValidationError("Secret is required")

        credential = await self.credentials.find_credential(role_name, LOCAL_PROVIDER, key)
        if credential is None:
            self.hasher.dummy_verify(secret)
            raise InvalidCredentialsError()
        if not self.hasher.verify(secret, credential.secret_hash):
            raise InvalidCredentialsError()

        identity = await self._credential_owner(credential)
        trail["identity_id"] = identity.id
        return await self._grant(identity, credential, ip_address, user_agent, trail)

    async def _login_sso(
        self,
        role: Role | str,
        business_key: str,
        sso_provider: str,
        sso_provider_key: str,
        ip_address: str | None,
        user_agent: str | None,
        trail: dict[str, str],
    ) -> AuthGrant:
        role_name = self._validate_role(role)
        key = self._require_business_key(business_key)
        if not sso_provider or not sso_provider_key:
            raise AuthValidationError("SSO provider and provider key are required")
        if sso_provider == LOCAL_PROVIDER:
            raise AuthValidationError("Use a secret to log in with the local provider")

        credential = await self.credentials.find_credential(
            role_name, sso_provider, sso_provider_key
        )
        if credential is None:
            raise InvalidCredentialsError()

        identity = await self._credential_owner(credential)
        if identity.business_key != key:
            raise InvalidCredentialsError()
        trail["identity_id"] = identity.id
        return await self._grant(identity, credential, ip_address, user_agent, trail)

    async def _refresh(
        self, refresh_token: str, role: Role | str | None, trail: dict[str, str]
    ) -> TokenPair:
        token = self.tokens.verify(refresh_token, TokenPurpose.REFRESH)
        trail["identity_id"] = token.identity_id
        trail["session_id"] = token.session_id

        now = self.clock()
        presented_hash = hash_token(refresh_token)
        session = await self.sessions.find_by_refresh_hash(presented_hash)

        if session is None:
            entry = await self.ledger.lookup(presented_hash)
            if entry is None:
                raise SessionNotFoundError("No session matches the refresh token")
            if self.revoke_on_replay and entry.reason is RevocationReason.ROTATED:
                _, changed = await self._revoke_session(entry.session_id, now)
                if changed:
                    logger.warning(
                        f"Refresh token replay on session {entry.session_id}; lineage revoked"
                    )
            raise SessionRevokedError(
                "Refresh token was already used or revoked",
                details={"reason": entry.reason.value},
            )

        if (
            session.id != token.session_id
            or session.identity_id != token.identity_id
            or session.role != token.role
            or (role is not None and session.role != Role.coerce(role).name)
        ):
            raise SessionNotFoundError("No session matches the refresh token")
        if session.is_revoked():
            raise SessionRevokedError("Session has been revoked")
        if session.is_expired(now):
            raise SessionExpiredError("Session has expired")

        identity = await self.identities.get_identity(session.identity_id)
        if identity is None or not identity.is_active():
            raise ActorInactiveError("Account is not active")

        access, refresh = self.tokens.issue_pair(identity.id, identity.role, session.id, now)
        rotated = await self.sessions.rotate(
            session.id,
            expected_refresh_hash=presented_hash,
            new_refresh_hash=hash_token(refresh.value),
            new_session_token_hash=hash_token(access.value),
            expires_at=refresh.expires_at,
            now=now,
        )
        if rotated is None:
            if await self.sessions.get_session(session.id) is None:
                raise SessionNotFoundError("No session matches the refresh token")
            raise SessionRevokedError("Refresh token was already used or revoked")

        await self.ledger.record(presented_hash, session.id, RevocationReason.ROTATED, now)
        await self.ledger.record(
            session.session_token_hash, session.id, RevocationReason.ROTATED, now
        )
        logger.debug(f"Rotated tokens of session {session.id}")
        return TokenPair.from_tokens(access, refresh)

    async def _revoke(
        self,
        session_id: str | None,
        refresh_token: str | None,
        trail: dict[str, str],
    ) -> RevocationOutcome:
        if (session_id is None) == (refresh_token is None):
            raise AuthValidationError("Provide either a session ID or a refresh token")

        if refresh_token is not None:
            token = self.tokens.verify(
                refresh_token, TokenPurpose.REFRESH, allow_expired=True
            )
            session_id = token.session_id
            current = await self.sessions.get_session(session_id)
            if current is not None and (
                current.identity_id != token.identity_id or current.role != token.role
            ):
                raise SessionNotFoundError("No session matches the refresh token")
        elif not isinstance(session_id, str) or not session_id.strip():
            raise AuthValidationError("Session ID cannot be empty")

        trail["session_id"] = session_id
        session, changed = await self._revoke_session(session_id, self.clock())
        if session is None:
            return RevocationOutcome(session_ids=(), revoked=False)

        trail["identity_id"] = session.identity_id
        if changed:
            logger.info(f"Revoked session {session.id}")
        return RevocationOutcome(session_ids=(session.id,), revoked=changed)

    async def _revoke_all(
        self, identity_id: str, context: dict[str, Any]
    ) -> RevocationOutcome:
        if not identity_id or not isinstance(identity_id, str):
            raise AuthValidationError("Identity ID cannot be empty")

        now = self.clock()
        revoked = await self.sessions.revoke_identity_sessions(identity_id, now)
        for session in revoked:
            await self._record_revoked_hashes(session, now)

        context["count"] = len(revoked)
        logger.info(f"Revoked {len(revoked)} session(s) of identity {identity_id}")
        return RevocationOutcome(
            session_ids=tuple(session.id for session in revoked),
            revoked=bool(revoked),
        )

    async def _authenticate(
        self, token: str, role: Role | str | None, stateful: bool
    ) -> Principal:
        if not isinstance(token, str) or not token.strip():
            raise TokenMalformedError("Token is missing")
        if token.startswith("Bearer "):
            value = parse_bearer_header(token)
            if value is None:
                raise TokenMalformedError("Authorization header carries no token")
        elif " " in token.strip():
            raise TokenMalformedError("Unsupported authorization scheme")
        else:
            value = token.strip()

        access = self.tokens.verify(value, TokenPurpose.ACCESS)
        if role is not None and access.role != Role.coerce(role).name:
            raise TokenMalformedError("Token was issued for another role")

        if stateful:
            if not access.session_id:
                raise SessionNotFoundError("Token is not bound to a session")
            session = await self.sessions.get_session(access.session_id)
            if session is None or session.identity_id != access.identity_id:
                raise SessionNotFoundError("Session not found")
            if session.is_revoked():
                raise SessionRevokedError("Session has been revoked")
            digest = hash_token(value)
            if not secure_compare(
                session.session_token_hash, digest
            ) or await self.ledger.is_revoked(digest):
                raise SessionRevokedError("Access token was superseded or revoked")
            if session.is_expired(self.clock()):
                raise SessionExpiredError("Session has expired")
            identity = await self.identities.get_identity(access.identity_id)
            if identity is None or not identity.is_active():
                raise ActorInactiveError("Account is not active")

        return Principal(identity_id=access.identity_id, role=access.role)

    # Helpers

    async def _run(
        self,
        action: AuditAction,
        failure_action: AuditAction,
        operation: Callable[[], Awaitable[Any]],
        trail: dict[str, str],
        context: dict[str, Any],
    ) -> AuthResult:
        try:
            value = await operation()
        except AuthError as e:
            error = e
        except Exception as e:
            error = self._internal_error(action.value, e)
        else:
            await self.audit.record(
                action,
                AuditOutcome.SUCCESS,
                session_id=trail.get("session_id"),
                identity_id=trail.get("identity_id"),
                context=context,
            )
            return AuthResult.success(value)

        logger.info(f"{action.value} failed: {error.status.value}")
        await self.audit.record(
            failure_action,
            AuditOutcome.FAILURE,
            session_id=trail.get("session_id"),
            identity_id=trail.get("identity_id"),
            context={**context, "error": error.status.value},
        )
        return AuthResult.failure(error)

    @staticmethod
    def _internal_error(operation: str, error: Exception) -> StorageError:
        logger.error(
            f"Unexpected error during {operation}: {type(error).__name__}: {error}",
            exc_info=error,
        )
        return StorageError(
            f"{operation} failed due to an internal error",
            details={"cause": type(error).__name__},
        )

    @staticmethod
    def _context(role: Role | str | None, **values: Any) -> dict[str, Any]:
        context: dict[str, Any] = {}
        if role is not None:
            context["role"] = sanitize_user_input(str(role), max_length=64)
        for name, value in values.items():
            if value is not None:
                context[name] = sanitize_user_input(str(value), max_length=256)
        return context

    @staticmethod
    async def _compensate(undo: Awaitable[Any], what: str) -> None:
        try:
            await undo
        except Exception as e:
            logger.error(f"Failed to roll back {what} after a failed registration: {e}")

    def _validate_role(self, role: Role | str) -> str:
        name = Role.coerce(role).name
        if self.roles is not None and name not in self.roles:
            raise AuthValidationError(f"Unknown role: {name}")
        return name

    def _require_business_key(self, business_key: str) -> str:
        if not isinstance(business_key, str) or not business_key.strip():
            raise AuthValidationError("Business key is required")
        return normalize_business_key(business_key, self.business_key_format)

    def _validate_business_key(self, business_key: str) -> str:
        key = self._require_business_key(business_key)
        if self.business_key_format == "email" and not is_valid_email(key):
            raise AuthValidationError("Business key must be a valid email address")
        return key

    @staticmethod
    def _validate_display_name(display_name: str) -> str:
        if not isinstance(display_name, str):
            raise AuthValidationError("Display name is required")
        name = display_name.strip()
        if not name:
            raise AuthValidationError("Display name is required")
        if len(name) > MAX_DISPLAY_NAME_LENGTH:
            raise AuthValidationError(
                f"Display name must be at most {MAX_DISPLAY_NAME_LENGTH} characters"
            )
        if any(unicodedata.category(ch) == "Cc" for ch in name):
            raise AuthValidationError("Display name contains control characters")
        return name

    def _validate_method(
        self,
        business_key: str,
        secret: str | None,
        sso_provider: str | None,
        sso_provider_key: str | None,
    ) -> tuple[str, str]:
        has_secret = secret is not None
        has_sso = sso_provider is not None or sso_provider_key is not None
        if has_secret == has_sso:
            raise AuthValidationError(
                "Exactly one authentication method is required: a secret or an SSO identity"
            )

        if has_secret:
            if not isinstance(secret, str) or len(secret) < self.min_secret_length:
                raise AuthValidationError(
                    f"Secret must be at least {self.min_secret_length} characters"
                )
            return LOCAL_PROVIDER, business_key

        if not sso_provider or not sso_provider_key:
            raise AuthValidationError("SSO provider and provider key are both required")
        if sso_provider == LOCAL_PROVIDER:
            raise AuthValidationError("The local provider requires a secret")
        return sso_provider, sso_provider_key

    async def _bind_credential(self, credential: Credential) -> Credential:
        try:
            return await self.credentials.add_credential(credential)
        except DuplicateIdentityError:
            existing = await self.credentials.find_credential(
                credential.role, credential.provider, credential.provider_key
            )
            if existing is None:
                raise
            owner = await self.identities.get_identity(existing.identity_id)
            if owner is not None and not owner.is_deleted():
                raise
            # Supersede the credential of a deleted identity
            await self.credentials.retire_credential(existing.id)
            return await self.credentials.add_credential(credential)

    async def _credential_owner(self, credential: Credential) -> Identity:
        identity = await self.identities.get_identity(credential.identity_id)
        if identity is None:
            raise InvalidCredentialsError()
        if not identity.is_active():
            raise ActorInactiveError("Account is not active")
        return identity

    async def _grant(
        self,
        identity: Identity,
        credential: Credential,
        ip_address: str | None,
        user_agent: str | None,
        trail: dict[str, str],
    ) -> AuthGrant:
        now = self.clock()
        await self.credentials.mark_authenticated(credential.id, now)
        session, pair = await self._open_session(identity, now, ip_address, user_agent)
        trail["session_id"] = session.id
        logger.info(f"Opened session {session.id} for identity {identity.id}")
        return AuthGrant(identity=identity.projection(), tokens=pair, session_id=session.id)

    async def _open_session(
        self,
        identity: Identity,
        now: datetime,
        ip_address: str | None,
        user_agent: str | None,
    ) -> tuple[Session, TokenPair]:
        session_id = new_id()
        access, refresh = self.tokens.issue_pair(identity.id, identity.role, session_id, now)
        session = await self.sessions.create_session(
            Session(
                id=session_id,
                identity_id=identity.id,
                role=identity.role,
                session_token_hash=hash_token(access.value),
                refresh_token_hash=hash_token(refresh.value),
                issued_at=now,
                expires_at=refresh.expires_at,
                ip_address=ip_address,
                user_agent=sanitize_user_input(user_agent, 512) if user_agent else None,
            )
        )
        return session, TokenPair.from_tokens(access, refresh)

    async def _revoke_session(
        self, session_id: str, now: datetime
    ) -> tuple[Session | None, bool]:
        session, changed = await self.sessions.revoke(session_id, now)
        if session is not None and changed:
            await self._record_revoked_hashes(session, now)
        return session, changed

    async def _record_revoked_hashes(self, session: Session, now: datetime) -> None:
        await self.ledger.record(
            session.refresh_token_hash, session.id, RevocationReason.REVOKED, now
        )
        await self.ledger.record(
            session.session_token_hash, session.id, RevocationReason.REVOKED, now
        )
