"""User reconciler (identity ``NAME``).

``rsa_public_key`` is recorded by its ``SHA256:`` fingerprint, which is
what ``DESC USER`` reports as ``RSA_PUBLIC_KEY_FP``; changes are detected
by comparing fingerprints.  Clearing a string attribute issues ``UNSET``.
"""

from typing import Any

from warehouse_reconciler import statements
from warehouse_reconciler.catalog import readers
from warehouse_reconciler.reconcilers.base import Reconciler
from warehouse_reconciler.state.data import ResourceData
from warehouse_reconciler.state.models import UserState


class UserReconciler(Reconciler):
    model = UserState
    object_type = "USER"
    show_type = "USERS"
    update_order = (
        "name",
        "email",
        "login_name",
        "must_change_password",
        "default_role",
        "default_warehouse",
        "rsa_public_key",
        "display_name",
        "comment",
        "disabled",
    )
    properties = {
        "email": "EMAIL",
        "login_name": "LOGIN_NAME",
        "must_change_password": "MUST_CHANGE_PASSWORD",
        "default_role": "DEFAULT_ROLE",
        "default_warehouse": "DEFAULT_WAREHOUSE",
        "rsa_public_key": "RSA_PUBLIC_KEY",
        "display_name": "DISPLAY_NAME",
        "comment": "COMMENT",
        "disabled": "DISABLED",
    }

    def create_statement(self, desired: UserState) -> str:
        return statements.create_user(desired)

    def fetch(self, segments: list[str], data: ResourceData) -> dict[str, Any]:
        props = readers.desc_user(self.client, segments[0])
        return {
            "name": props.name or segments[0],
            "login_name": props.login_name,
            "email": props.email,
            "display_name": props.display_name,
            "comment": props.comment,
            "must_change_password": props.must_change_password,
            "disabled": props.disabled,
            "default_role": props.default_role,
            "default_warehouse": props.default_warehouse,
            "rsa_public_key": props.rsa_public_key_fp,
        }
