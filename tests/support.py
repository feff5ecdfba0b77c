"""Preview targets shared by the tests."""

from mailgallery import Attachment, Email, Gallery


class ResetPasswordEmail:
    @staticmethod
    def preview():
        return Email(
            subject="Reset your password",
            sender=("Sample", "noreply@sample.test"),
            to=[("Test User", "user@sample.test")],
            text_body="Please, reset your password: http://reset.pw",
            html_body='Please, reset your password <a href="http://reset.pw">here</a>.',
        )

    @staticmethod
    def preview_details():
        return {
            "title": "Reset Password",
            "description": "Sends instructions on how to reset password",
            "tags": [("passwords", "yes")],
        }


class WelcomeEmail:
    """Instance target with one inline and one file-backed attachment."""

    def __init__(self, attachment_path):
        self.attachment_path = attachment_path

    def preview(self):
        return Email(
            subject="Welcome to Sample App",
            to=["user@sample.test"],
            html_body="<h1>Welcome!</h1>",
            attachments=[
                Attachment(filename="hello.txt", content_type="text/plain", data=b"hello"),
                Attachment.from_path(self.attachment_path),
            ],
        )

    def preview_details(self):
        return {
            "title": "Welcome",
            "description": "Sends a warm welcome to the user",
            "tags": {"attachments": "yes"},
        }


class OptionsEmail:
    """Supports both call forms through an optional options argument."""

    @staticmethod
    def preview(options=None):
        locale = dict(options or ()).get("locale", "en")
        subject = {"fr": "Bonjour", "de": "Hallo"}.get(locale, "Hello")
        return Email(subject=subject, html_body=f"Welcome with options: {options!r}")

    @staticmethod
    def preview_details(options=None):
        locale = dict(options or ()).get("locale", "en")
        title = {
            "fr": "Email avec Options",
            "de": "Email mit Optionen",
        }.get(locale, "Email with Options")
        return {
            "title": title,
            "description": f"Email that supports options: {options!r}",
            "tags": [("locale", locale), ("options", "yes")],
        }


class SimpleOnlyEmail:
    """Only supports the zero-argument form."""

    @staticmethod
    def preview():
        return Email(subject="Simple")

    @staticmethod
    def preview_details():
        return [("title", "Simple")]


class CountingEmail:
    """Records how often each function is called."""

    def __init__(self, details=None):
        self.calls = {"preview": 0, "preview_details": 0}
        self.details = details if details is not None else {"title": "Counted"}

    def preview(self):
        self.calls["preview"] += 1
        return Email(subject="Counted")

    def preview_details(self):
        self.calls["preview_details"] += 1
        return self.details


def make_gallery(attachment_path, **kwargs):
    gallery = Gallery(**kwargs)
    with gallery.group("/auth", title="Auth"):
        gallery.preview("/reset_password", ResetPasswordEmail)
    gallery.preview("/welcome", WelcomeEmail(attachment_path))
    return gallery
