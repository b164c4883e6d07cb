"""
HTTP actions and outcomes (actions.py)

Tests HttpAction constructors and validation, Proceed/Act folding.
"""

import dataclasses

import pytest

from aquilauth.actions import (
    HTTP_FORBIDDEN,
    HTTP_FOUND,
    HTTP_OK,
    HTTP_UNAUTHORIZED,
    Act,
    HttpAction,
    Proceed,
)


# ============================================================================
# HttpAction
# ============================================================================

class TestHttpAction:

    def test_status_constants(self):
        assert HTTP_OK == 200
        assert HTTP_FOUND == 302
        assert HTTP_UNAUTHORIZED == 401
        assert HTTP_FORBIDDEN == 403

    def test_redirect(self):
        action = HttpAction.redirect("https://provider.example/auth")
        assert action.status == 302
        assert action.location == "https://provider.example/auth"
        assert action.is_redirect

    def test_redirect_other_status(self):
        assert HttpAction.redirect("/x", status=303).status == 303

    def test_redirect_rejects_non_redirect_status(self):
        with pytest.raises(ValueError):
            HttpAction.redirect("/x", status=200)

    def test_redirect_requires_location(self):
        with pytest.raises(ValueError):
            HttpAction(status=302)
        with pytest.raises(ValueError):
            HttpAction.redirect("")

    def test_invalid_status(self):
        with pytest.raises(ValueError):
            HttpAction(status=42)

    def test_unauthorized(self):
        action = HttpAction.unauthorized()
        assert action.status == 401
        assert action.location is None
        assert action.headers == ()
        assert not action.is_redirect

    def test_unauthorized_with_realm(self):
        action = HttpAction.unauthorized(realm="intranet")
        assert action.header("www-authenticate") == 'Basic realm="intranet"'

    def test_forbidden(self):
        assert HttpAction.forbidden() == HttpAction(status=403)

    def test_ok(self):
        action = HttpAction.ok("logged out")
        assert action.status == 200
        assert action.body == "logged out"

    def test_missing_header(self):
        assert HttpAction.ok().header("Location") is None

    def test_frozen(self):
        action = HttpAction.forbidden()
        with pytest.raises(dataclasses.FrozenInstanceError):
            action.status = 200

    def test_equality(self):
        assert HttpAction.redirect("/a") == HttpAction.redirect("/a")
        assert HttpAction.redirect("/a") != HttpAction.redirect("/b")

    def test_str(self):
        assert str(HttpAction.redirect("/a")) == "HttpAction(302 -> /a)"
        assert str(HttpAction.forbidden()) == "HttpAction(403)"


# ============================================================================
# Outcome
# ============================================================================

class TestOutcome:

    def test_proceed_value(self):
        outcome = Proceed("creds")
        assert not outcome.is_action
        assert outcome.value == "creds"
        assert outcome.action is None

    def test_proceed_absent(self):
        outcome = Proceed(None)
        assert not outcome.is_action
        assert outcome.value is None

    def test_act(self):
        action = HttpAction.ok()
        outcome = Act(action)
        assert outcome.is_action
        assert outcome.action is action

    def test_act_has_no_value(self):
        with pytest.raises(TypeError):
            _ = Act(HttpAction.ok()).value

    def test_fold(self):
        on_value = lambda v: f"value:{v}"
        on_action = lambda a: f"action:{a.status}"
        assert Proceed("x").fold(on_value, on_action) == "value:x"
        assert Act(HttpAction.forbidden()).fold(on_value, on_action) == "action:403"
