"""
Which top-level surface is on screen.

The nominal view only changes through `transition`, a pure table lookup.
What is actually rendered comes from `resolve`, which layers two rules on top:
an authenticated admin always gets the dashboard, and the preview without a
record falls back to intake.
"""

import logging
from enum import Enum

from folio.logic.auth import AdminAuth
from folio.logic.store import RecordStore

logger = logging.getLogger(__name__)


class View(str, Enum):
    INTAKE = "intake"
    PREVIEW = "preview"
    ADMIN_LOGIN = "admin_login"
    ADMIN_DASHBOARD = "admin_dashboard"


class ViewEvent(str, Enum):
    RECORD_PRODUCED = "record_produced"
    ADMIN_REQUESTED = "admin_requested"
    AUTH_SUCCESS = "auth_success"
    BACK = "back"
    LOGOUT = "logout"
    START_OVER = "start_over"


TRANSITIONS = {
    (View.INTAKE, ViewEvent.RECORD_PRODUCED): View.PREVIEW,
    (View.PREVIEW, ViewEvent.ADMIN_REQUESTED): View.ADMIN_LOGIN,
    (View.PREVIEW, ViewEvent.START_OVER): View.INTAKE,
    (View.ADMIN_LOGIN, ViewEvent.AUTH_SUCCESS): View.ADMIN_DASHBOARD,
    (View.ADMIN_LOGIN, ViewEvent.BACK): View.PREVIEW,
    # logging out always lands on the preview, whatever view was nominal
    (View.INTAKE, ViewEvent.LOGOUT): View.PREVIEW,
    (View.PREVIEW, ViewEvent.LOGOUT): View.PREVIEW,
    (View.ADMIN_LOGIN, ViewEvent.LOGOUT): View.PREVIEW,
    (View.ADMIN_DASHBOARD, ViewEvent.LOGOUT): View.PREVIEW,
}


def transition(view: View, event: ViewEvent) -> View:
    """Next nominal view; events that make no sense in `view` leave it unchanged."""
    return TRANSITIONS.get((view, event), view)


def resolve(view: View, is_authenticated: bool, has_record: bool) -> View:
    if is_authenticated:
        return View.ADMIN_DASHBOARD
    if view == View.PREVIEW and not has_record:
        return View.INTAKE
    if view == View.ADMIN_DASHBOARD:
        # nominal dashboard without a session (e.g. expired) goes back to login
        return View.ADMIN_LOGIN
    return view


class ViewController:
    def __init__(self, auth: AdminAuth, store: RecordStore, initial: View = View.INTAKE):
        self.auth = auth
        self.store = store
        self.state = initial

    def dispatch(self, event: ViewEvent) -> View:
        previous = self.state
        self.state = transition(self.state, event)
        if self.state == previous:
            logger.debug("View event %s ignored in %s", event.value, previous.value)
        else:
            logger.debug("View %s -> %s on %s", previous.value, self.state.value, event.value)
        return self.surface

    @property
    def surface(self) -> View:
        return resolve(self.state, self.auth.is_authenticated, self.store.has_record)
