"""Tests for configurator module."""

from unittest import mock

import pytest
import requests

from gheboot.configurator import InitialConfigClient, classify_response


def _response(text):
    resp = mock.Mock()
    resp.text = text
    return resp


@pytest.mark.parametrize(
    "body, not_ready",
    [
        ("Sorry, try later", True),
        ("<html>Sorry, the appliance is starting</html>", True),
        ("OK configured", False),
        ("", False),
        ("sorry lowercase does not match", False),
        # Unrelated failures still count as done
        ("500 Internal Server Error", False),
        # ...and unrelated mentions of the marker still trigger a retry
        ("Blocked by proxy. Sorry!", True),
    ],
)
def test_classify_response(body, not_ready):
    assert classify_response(body) is not_ready


class TestInitialConfigClient:
    def test_post_config_sends_multipart_form(self, license_file):
        session = mock.Mock()
        session.post.return_value = _response("OK")
        client = InitialConfigClient(session=session, insecure=True)

        body = client.post_config("192.168.1.57", "s3cret", license_file)

        assert body == "OK"
        session.post.assert_called_once()
        args, kwargs = session.post.call_args
        assert args[0] == "https://192.168.1.57/manage/v1/config/init"
        assert kwargs["auth"] == ("api_key", "s3cret")
        assert kwargs["data"] == {"password": "s3cret"}
        assert "license" in kwargs["files"]
        assert kwargs["verify"] is False
        assert kwargs["allow_redirects"] is True

    def test_post_config_verifies_tls_by_default(self, license_file):
        session = mock.Mock()
        session.post.return_value = _response("OK")

        InitialConfigClient(session=session).post_config("10.0.0.2", "pw", license_file)

        assert session.post.call_args[1]["verify"] is True

    @mock.patch("gheboot.configurator.requests.post")
    def test_post_config_uses_requests_without_session(self, mock_post, license_file):
        mock_post.return_value = _response("done")

        assert InitialConfigClient().post_config("10.0.0.2", "pw", license_file) == "done"
        mock_post.assert_called_once()

    def test_post_config_returns_transport_error_text(self, license_file):
        session = mock.Mock()
        session.post.side_effect = requests.ConnectionError("Connection refused")

        body = InitialConfigClient(session=session).post_config("10.0.0.2", "pw", license_file)

        assert "Connection refused" in body

    def test_configure_retries_until_ready(self, license_file, sleeps, fake_sleep):
        session = mock.Mock()
        session.post.side_effect = [
            _response("Sorry, try later"),
            _response("Sorry, try later"),
            _response("OK configured"),
        ]
        client = InitialConfigClient(attempts=5, delay=45, session=session, sleep=fake_sleep)

        outcome = client.configure("192.168.1.57", "s3cret", license_file)

        assert outcome.success is True
        assert [a.number for a in outcome.attempts] == [1, 2, 3]
        assert [a.not_ready for a in outcome.attempts] == [True, True, False]
        assert session.post.call_count == 3
        assert sleeps == [45, 45]
        assert outcome.setup_url == "https://192.168.1.57:8443/setup"

    def test_configure_gives_up_after_budget(self, license_file, sleeps, fake_sleep):
        session = mock.Mock()
        session.post.return_value = _response("Sorry, try later")
        client = InitialConfigClient(attempts=5, delay=45, session=session, sleep=fake_sleep)

        outcome = client.configure("192.168.1.57", "s3cret", license_file)

        assert outcome.success is False
        assert session.post.call_count == 5
        assert len(outcome.attempts) == 5
        assert sleeps == [45] * 4

    def test_configure_stops_on_first_response(self, license_file, sleeps, fake_sleep):
        session = mock.Mock()
        session.post.return_value = _response("OK configured")
        client = InitialConfigClient(session=session, sleep=fake_sleep)

        outcome = client.configure("192.168.1.57", "s3cret", license_file)

        assert outcome.success is True
        assert session.post.call_count == 1
        assert sleeps == []

    def test_configure_treats_transport_error_as_terminal(self, license_file, sleeps, fake_sleep):
        session = mock.Mock()
        session.post.side_effect = requests.exceptions.SSLError("certificate verify failed")
        client = InitialConfigClient(session=session, sleep=fake_sleep)

        outcome = client.configure("192.168.1.57", "s3cret", license_file)

        assert session.post.call_count == 1
        assert outcome.success is True
        assert "certificate verify failed" in outcome.attempts[0].body


def test_post_config_always_sends_a_timeout(license_file):
    session = mock.Mock()
    session.post.return_value = _response("OK")

    InitialConfigClient(session=session).post_config("10.0.0.2", "pw", license_file)
    InitialConfigClient(session=session, timeout=7).post_config("10.0.0.2", "pw", license_file)

    first, second = session.post.call_args_list
    assert first[1]["timeout"] == 30
    assert second[1]["timeout"] == 7
