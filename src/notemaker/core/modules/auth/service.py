import secrets
from datetime import datetime, timedelta

import structlog
from pymongo.errors import PyMongoError

from notemaker.core.core import Service
from notemaker.core.modules.auth.models import AuthResult, SignupStarted
from notemaker.core.modules.auth.pending import PendingRegistration, open_registration, seal_registration
from notemaker.core.modules.otp.models import OneTimeCode, OtpPurpose
from notemaker.core.modules.token.models import TokenClaims, TokenPair
from notemaker.core.modules.user.models import User, UserView
from notemaker.core.modules.user.validators import validate_email, validate_name, validate_password
from notemaker.errors import (
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidOTPError,
    InvalidPendingError,
    MissingFieldsError,
    MissingTokenError,
    OTPAlreadyUsedError,
    OTPError,
    OTPExpiredError,
    SessionNotFoundError,
    UserNotFoundError,
)
from notemaker.utils import normalize_email, now

logger = structlog.get_logger(__name__)

OAUTH_PASSWORD_PREFIX = "oauth:"


def _require(**fields: object) -> None:
    missing = [name for name, value in fields.items() if not value]
    if missing:
        raise MissingFieldsError(
            f"Missing required fields: {', '.join(missing)}",
            [{"field": name, "message": f"{name} is required"} for name in missing],
        )


class AuthService(Service):
    """Signup, login, token refresh, logout, and password reset flows.

    Every operation reads the clock once and uses that instant for all of
    its expiry comparisons and writes.
    """

    _dummy_hash: str | None = None

    async def on_start(self) -> None:
        # Compared against when the email is unknown so login costs the same either way
        self._dummy_hash = await self.core.services.user.hash_password(secrets.token_urlsafe(16))

    # === Signup ===
    async def request_signup(self, email: str, password: str, first_name: str, last_name: str) -> SignupStarted:
        """Send a signup OTP and hand the pending registration back to the caller.

        No user is created here; see ``verify_signup_otp``.
        """
        _require(email=email, password=password, firstName=first_name, lastName=last_name)
        email = normalize_email(email)
        validate_email(email)
        validate_password(password)
        validate_name(first_name, "firstName")
        validate_name(last_name, "lastName")

        users = self.core.services.user
        if await users.find_by_email(email) is not None:
            raise DuplicateEmailError

        at = now()
        hashed_password = await users.hash_password(password)
        otp = await self.core.services.otp.create(email, OtpPurpose.SIGNUP, at)
        await self.core.services.mail.send_otp(email, otp.code, OtpPurpose.SIGNUP)

        pending = seal_registration(
            email,
            hashed_password,
            first_name.strip(),
            last_name.strip(),
            self.core.config.jwt_pending_secret,
            at,
            timedelta(minutes=self.core.config.otp_ttl_minutes),
        )
        logger.info("signup_requested", email=email)
        return SignupStarted(email=email, temp_data=pending)

    async def verify_signup_otp(self, email: str, code: str, pending: PendingRegistration | None) -> AuthResult:
        """Consume a signup OTP, create the verified user, and sign them in."""
        _require(email=email, otp=code, tempData=pending)
        email = normalize_email(email)
        at = now()

        registration, sealed_until = open_registration(email, pending, self.core.config.jwt_pending_secret)
        if at >= sealed_until:
            # The code outlives a lapsed seal only when it came from a later signup
            if await self.core.services.otp.find_latest_matching(email, code, OtpPurpose.SIGNUP, at) is None:
                raise await self._explain_otp_failure(email, code, OtpPurpose.SIGNUP, at)
            raise InvalidPendingError
        await self._claim_otp(email, code, OtpPurpose.SIGNUP, at, explain=True)

        user = await self.core.services.user.create_with_hash(
            email,
            registration.hashed_password,
            registration.first_name,
            registration.last_name,
            verified=True,
        )
        logger.info("signup_completed", user_id=str(user.id))
        return await self._start_session(user, at)

    # === Login and sessions ===
    async def login(self, email: str, password: str) -> AuthResult:
        """Authenticate with email and password.

        Unknown email and wrong password fail identically.
        """
        at = now()
        users = self.core.services.user
        user = await users.find_by_email(email) if email else None
        if user is None:
            if self._dummy_hash is not None:
                await users.verify_password(user=_placeholder_user(self._dummy_hash), password=password or "")
            raise InvalidCredentialsError
        if not await users.verify_password(user, password or ""):
            logger.info("login_failed", user_id=str(user.id))
            raise InvalidCredentialsError

        await users.touch_last_login(user.id, at)
        return await self._start_session(user, at)

    async def sign_in_federated(self, email: str, first_name: str, last_name: str) -> AuthResult:
        """Upsert a verified user for a provider-asserted email and sign them in.

        New accounts get an unusable password placeholder, so they can only
        sign in through the provider.
        """
        at = now()
        email = normalize_email(email)
        users = self.core.services.user
        user = await users.find_by_email(email)
        if user is None:
            placeholder = f"{OAUTH_PASSWORD_PREFIX}{secrets.token_urlsafe(32)}"
            try:
                user = await users.create_with_hash(email, placeholder, first_name, last_name, verified=True)
            except DuplicateEmailError:
                # Lost a race with a concurrent first sign-in
                user = await users.find_by_email(email)
                if user is None:
                    raise
        await users.touch_last_login(user.id, at)
        return await self._start_session(user, at)

    async def refresh(self, refresh_token: str | None) -> TokenPair:
        """Rotate a refresh token in place and return a new pair."""
        if not refresh_token:
            raise MissingTokenError("Refresh token required")

        claims = self.core.tokens.verify_refresh(refresh_token)
        at = now()
        sessions = self.core.services.session
        session = await sessions.find_active_by_token(refresh_token, at)
        if session is None or session.user_id != claims.user_id:
            raise SessionNotFoundError

        tokens = self.core.tokens.issue(claims, at)
        if not await sessions.rotate(session.id, refresh_token, tokens.refresh_token, at):
            raise SessionNotFoundError
        return tokens

    async def logout(self, refresh_token: str | None) -> None:
        """Drop the session behind ``refresh_token``. Never fails."""
        if not refresh_token:
            return
        try:
            await self.core.services.session.delete(refresh_token)
        except PyMongoError:
            logger.exception("logout_delete_failed")

    # === Password reset ===
    async def forgot_password(self, email: str) -> None:
        """Send a reset OTP if the account exists; behaves the same when it does not."""
        if not email:
            return
        email = normalize_email(email)
        try:
            user = await self.core.services.user.find_by_email(email)
            if user is None:
                logger.info("password_reset_unknown_email")
                return
            otp = await self.core.services.otp.create(email, OtpPurpose.PASSWORD_RESET, now())
        except PyMongoError:
            logger.exception("password_reset_request_failed")
            return

        await self.core.services.mail.send_otp(email, otp.code, OtpPurpose.PASSWORD_RESET)
        logger.info("password_reset_requested", user_id=str(user.id))

    async def reset_password(self, email: str, code: str, new_password: str) -> None:
        """Set a new password with a reset OTP and revoke every session of the user."""
        _require(email=email, otp=code, newPassword=new_password)
        validate_password(new_password, field="newPassword")
        email = normalize_email(email)
        at = now()

        await self._claim_otp(email, code, OtpPurpose.PASSWORD_RESET, at, explain=False)

        user = await self.core.services.user.find_by_email(email)
        if user is None:
            raise UserNotFoundError
        await self.core.services.user.set_password(user.id, new_password, at)
        await self.core.services.session.revoke_all_for_user(user.id)
        logger.info("password_reset_completed", user_id=str(user.id))

    # === Internals ===
    async def _claim_otp(
        self, email: str, code: str, purpose: OtpPurpose, at: datetime, *, explain: bool
    ) -> OneTimeCode:
        """Find the newest valid code and mark it used.

        With ``explain`` a failure reports why (used, expired, unknown);
        otherwise it is always a generic InvalidOTPError.
        """
        otps = self.core.services.otp
        otp = await otps.find_latest_matching(email, code, purpose, at)
        if otp is not None and await otps.mark_used(otp.id):
            return otp

        if not explain:
            raise InvalidOTPError("Invalid or expired OTP")
        if otp is not None:
            # Found valid but claimed concurrently by another request
            raise OTPAlreadyUsedError
        raise await self._explain_otp_failure(email, code, purpose, at)

    async def _explain_otp_failure(self, email: str, code: str, purpose: OtpPurpose, at: datetime) -> OTPError:
        latest = await self.core.services.otp.find_latest_matching(email, code, purpose, at, valid_only=False)
        if latest is None:
            return InvalidOTPError()
        if latest.is_used:
            return OTPAlreadyUsedError()
        if latest.is_expired(at):
            return OTPExpiredError()
        return InvalidOTPError()

    async def _start_session(self, user: User, at: datetime) -> AuthResult:
        tokens = self.core.tokens.issue(TokenClaims(user_id=user.id, email=user.email), at)
        await self.core.services.session.create(user.id, tokens.refresh_token, at)
        return AuthResult(user=UserView.from_domain(user), tokens=tokens)


def _placeholder_user(password_hash: str) -> User:
    return User(email="", password_hash=password_hash, first_name="", last_name="")
