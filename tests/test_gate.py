# tests/test_gate.py

"""
Tests for the capability gate state machine.
"""

import asyncio

from core.gate import evaluate_gate
from core.session import NO_SESSION, Principal, SessionContext
from models.enums import GateState


def _loaded(role, store):
    session = SessionContext(Principal(user_id="u1", role=role))
    asyncio.run(session.role_changed(role, store))
    return session


def test_loading_makes_no_decision(role_store):
    session = _loaded("Cashier", role_store)
    session.loading = True

    decision = evaluate_gate(session, "payments", "/payments")
    assert decision.state == GateState.loading
    assert decision.redirect_to is None


def test_no_session_redirects_to_entry_and_preserves_location():
    decision = evaluate_gate(NO_SESSION, "payments", "/payments")

    assert decision.state == GateState.unauthenticated
    assert decision.redirect_to == "/"
    assert decision.preserved_from == "/payments"


def test_allowed(role_store):
    decision = evaluate_gate(_loaded("Cashier", role_store), "payments", "/payments")
    assert decision.state == GateState.allowed
    assert decision.allowed


def test_denied_redirects_to_dashboard_when_accessible(role_store):
    decision = evaluate_gate(_loaded("Cashier", role_store), "reports", "/reports")

    assert decision.state == GateState.denied
    assert decision.redirect_to == "/dashboard"
    assert decision.preserved_from is None


def test_denied_redirects_to_first_accessible_module(role_store):
    # Records Clerk: payments + reports only
    decision = evaluate_gate(_loaded("Records Clerk", role_store), "documents", "/documents")
    assert decision.redirect_to == "/payments"


def test_denied_with_nothing_accessible_goes_to_entry(role_store):
    decision = evaluate_gate(_loaded("No Access", role_store), "dashboard", "/dashboard")

    assert decision.state == GateState.denied
    assert decision.redirect_to == "/"


def test_denied_never_redirects_back_to_the_same_path(role_store):
    session = _loaded("Records Clerk", role_store)
    # Pretend the first accessible path is the one being requested
    decision = evaluate_gate(session, "access_control", "/payments")
    assert decision.redirect_to == "/"


def test_super_admin_always_allowed(role_store):
    session = _loaded("Super Admin", role_store)
    assert evaluate_gate(session, "access_control", "/roles").allowed
    assert evaluate_gate(session, "made_up", "/made-up").allowed
