"""
Translations for server-generated strings (emails, API messages).

Keys are ``namespace:key``. Unknown locales fall back to English and unknown
keys come back unchanged, so a missing translation never breaks a request.
"""

from __future__ import annotations

from typing import Optional

FALLBACK_LOCALE = "en"

TRANSLATIONS: dict[str, dict[str, str]] = {
    "en": {
        "authentication:resetYourPassword": "Reset Your Password",
        "authentication:youAreReceivingResetPassword": (
            "You are receiving this because you (or someone else) have requested "
            "the reset of the password for your account. Please click on the "
            "following link, or paste this into your browser to complete the process:"
        ),
        "authentication:youDidNotRequestPassword": (
            "If you did not request this, please ignore this email and your "
            "password will remain unchanged."
        ),
        "authentication:emailOrPasswordIncorrect": (
            "The email or password provided is incorrect."
        ),
        "authentication:passwordResetSuccessfully": "Password reset successfully.",
        "authentication:successfullyLoggedIn": "Successfully logged in.",
        "error:missingEmail": "Missing email.",
        "error:missingPassword": "Missing password.",
        "error:missingToken": "Missing token.",
        "error:userEmailAlreadyRegistered": (
            "A user with the given email is already registered."
        ),
        "error:tokenInvalidOrExpired": "Token is either invalid or has expired.",
        "error:userLocked": (
            "This user is locked due to having too many failed login attempts."
        ),
        "error:notFound": "The requested resource was not found.",
        "error:notAllowed": "You are not allowed to perform this action.",
        "error:invalidWhere": "The where query is invalid.",
        "error:missingWhere": "A where query is required for this operation.",
        "error:invalidExpiration": "The expiration date is invalid.",
        "general:success": "Success",
        "general:deletedSuccessfully": "Deleted successfully.",
        "general:successfullyCreated": "Successfully created.",
        "general:updatedSuccessfully": "Updated successfully.",
    },
    "es": {
        "authentication:resetYourPassword": "Restablecer tu contraseña",
        "authentication:youAreReceivingResetPassword": (
            "Estás recibiendo esto porque tú (o alguien más) ha solicitado "
            "restablecer la contraseña de tu cuenta. Por favor haz clic en el "
            "siguiente enlace o pégalo en tu navegador para completar el proceso:"
        ),
        "authentication:youDidNotRequestPassword": (
            "Si tú no solicitaste esto, por favor ignora este correo y tu "
            "contraseña permanecerá sin cambios."
        ),
        "authentication:emailOrPasswordIncorrect": (
            "El correo o la contraseña introducidos no son correctos."
        ),
        "authentication:passwordResetSuccessfully": (
            "Contraseña restablecida con éxito."
        ),
        "authentication:successfullyLoggedIn": "Sesión iniciada con éxito.",
        "error:missingEmail": "Falta el correo electrónico.",
        "error:missingPassword": "Falta la contraseña.",
        "error:missingToken": "Falta el token.",
        "error:userEmailAlreadyRegistered": (
            "Ya existe un usuario registrado con ese correo."
        ),
        "error:tokenInvalidOrExpired": "El token es inválido o ya expiró.",
        "error:userLocked": (
            "Este usuario está bloqueado por demasiados intentos fallidos de "
            "inicio de sesión."
        ),
        "error:notFound": "El recurso solicitado no fue encontrado.",
        "error:notAllowed": "No tienes permiso para realizar esta acción.",
        "error:invalidWhere": "La consulta where no es válida.",
        "error:missingWhere": "Esta operación requiere una consulta where.",
        "error:invalidExpiration": "La fecha de expiración no es válida.",
        "general:success": "Éxito",
        "general:deletedSuccessfully": "Borrado con éxito.",
        "general:successfullyCreated": "Creado con éxito.",
        "general:updatedSuccessfully": "Actualizado con éxito.",
    },
}


class Translator:
    """Translator bound to one locale; ``t(key)`` looks up a string."""

    def __init__(self, locale: str = FALLBACK_LOCALE) -> None:
        self.locale = locale if locale in TRANSLATIONS else FALLBACK_LOCALE

    def t(self, key: str) -> str:
        value = TRANSLATIONS[self.locale].get(key)
        if value is None:
            value = TRANSLATIONS[FALLBACK_LOCALE].get(key, key)
        return value


def negotiate_locale(
    accept_language: Optional[str], default: str = FALLBACK_LOCALE
) -> str:
    """Pick the best supported locale from an ``Accept-Language`` header.

    Honours q-values; region subtags (``es-MX``) match their base language.
    """
    if not accept_language:
        return default if default in TRANSLATIONS else FALLBACK_LOCALE

    candidates: list[tuple[float, int, str]] = []
    for position, part in enumerate(accept_language.split(",")):
        lang, _, params = part.strip().partition(";")
        quality = 1.0
        if params.strip().startswith("q="):
            try:
                quality = float(params.strip()[2:])
            except ValueError:
                quality = 0.0
        base = lang.strip().lower().split("-")[0]
        if base:
            candidates.append((quality, -position, base))

    for quality, _, base in sorted(candidates, reverse=True):
        if quality > 0 and base in TRANSLATIONS:
            return base
    return default if default in TRANSLATIONS else FALLBACK_LOCALE


def translator_for(
    accept_language: Optional[str], default: str = FALLBACK_LOCALE
) -> Translator:
    return Translator(negotiate_locale(accept_language, default))
