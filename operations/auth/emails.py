"""Default email bodies rendered with Jinja2."""

import os

from jinja2 import Environment, FileSystemLoader, select_autoescape

from shared.i18n import Translator

_DEFAULT_TEMPLATE_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))),
    "templates",
    "emails",
)

_jinja = Environment(
    loader=FileSystemLoader(_DEFAULT_TEMPLATE_DIR),
    autoescape=select_autoescape(["html", "xml"]),
)


def render_forgot_password_html(translator: Translator, reset_url: str) -> str:
    template = _jinja.get_template("forgot_password.html")
    return template.render(
        intro=translator.t("authentication:youAreReceivingResetPassword"),
        reset_url=reset_url,
        outro=translator.t("authentication:youDidNotRequestPassword"),
    )
