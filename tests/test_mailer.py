import pytest

from pluginhub.mailer import EmailManager


class FakeSMTP:
    def __init__(self, sessions, host, port):
        self.host = host
        self.port = port
        self.tls = False
        self.credentials = None
        self.sent = []
        sessions.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self, context=None):
        self.tls = True

    def login(self, user, password):
        self.credentials = (user, password)

    def send_message(self, message):
        self.sent.append(message)


@pytest.fixture
def sessions():
    return []


@pytest.fixture
def manager(sessions):
    password = "password"
    return EmailManager(
        "smtp.example.com",
        587,
        "mailer",
        password=password,
        default_from="Hub <noreply@example.com>",
        smtp_factory=lambda host, port: FakeSMTP(sessions, host, port),
    )


@pytest.mark.asyncio
async def test_send_email_delivers_html_message(manager, sessions):
    body = "<html><body>hi</body></html>"
    result = await manager.send_email("alice@example.com", "Verification Link", body)
    assert result is None
    assert len(sessions) == 1
    smtp = sessions[0]
    assert (smtp.host, smtp.port) == ("smtp.example.com", 587)
    assert smtp.tls is True
    message = smtp.sent[0]
    assert message["To"] == "alice@example.com"
    assert message["Subject"] == "Verification Link"
    assert "noreply@example.com" in message["From"]
    assert message.get_content_type() == "text/html"
    assert body in message.get_content()


@pytest.mark.asyncio
async def test_send_email_logs_in_with_credentials(manager, sessions):
    password = "password"
    result = await manager.send_email("bob@example.com", "s", "<p>x</p>")
    assert result is None
    assert len(sessions) == 1
    assert sessions[0].credentials == ("mailer", password)
    assert len(sessions[0].sent) == 1


@pytest.mark.asyncio
async def test_invalid_recipient_raises(manager, sessions):
    with pytest.raises(ValueError):
        await manager.send_email("not an address", "s", "b")
    assert sessions == []


@pytest.mark.asyncio
async def test_invalid_sender_raises(sessions):
    password = "password"
    bad = EmailManager(
        "smtp.example.com",
        587,
        "mailer",
        password=password,
        default_from="nobody",
        smtp_factory=lambda host, port: FakeSMTP(sessions, host, port),
    )
    with pytest.raises(ValueError):
        await bad.send_email("alice@example.com", "s", "b")


def test_empty_host_rejected():
    password = "password"
    with pytest.raises(ValueError):
        EmailManager("", 587, "mailer", password=password, default_from="a@example.com")