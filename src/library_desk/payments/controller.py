from __future__ import annotations

from flask import Flask

from ..common.http import (
    admin_required,
    current_role,
    current_user_id,
    json_body,
    json_endpoint,
    login_required,
    ok,
    serialize,
)
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/payments/upi", methods=["POST"], endpoint="confirm_upi")
    @login_required
    @json_endpoint
    def confirm_upi():
        receipt = container.payment_service.confirm_upi(
            user_id=current_user_id(),
            admission_id=int(json_body().get("admission_id") or 0),
        )
        return ok({"receipt_number": receipt, "message": "Payment successful. Your admission is now active."})

    @app.route("/payments/cash", methods=["POST"], endpoint="submit_cash_payment")
    @login_required
    @json_endpoint
    def submit_cash_payment():
        payment_id = container.payment_service.submit_cash_payment(
            user_id=current_user_id(),
            admission_id=int(json_body().get("admission_id") or 0),
        )
        return ok(
            {"payment_id": payment_id, "message": "Cash payment request submitted. Please pay at the library desk."},
            201,
        )

    @app.route("/payments/history", methods=["GET"], endpoint="payment_history")
    @login_required
    @json_endpoint
    def payment_history():
        user_id = current_user_id()
        return ok(
            {
                "history": serialize(list(container.payment_service.history_for_user(user_id))),
                "cash_payments": serialize(list(container.payment_service.cash_payments_for_user(user_id))),
            }
        )

    @app.route("/admin/payments/pending", methods=["GET"], endpoint="admin_pending_payments")
    @admin_required
    @json_endpoint
    def admin_pending_payments():
        payments = container.payment_service.list_pending(current_role=current_role())
        return ok({"payments": [dict(serialize(p), target=p.target.value) for p in payments]})

    @app.route("/admin/payments/<int:payment_id>/approve", methods=["POST"], endpoint="admin_approve_payment")
    @admin_required
    @json_endpoint
    def admin_approve_payment(payment_id: int):
        payment = container.payment_service.approve_cash_payment(
            current_role=current_role(),
            admin_user_id=current_user_id(),
            payment_id=payment_id,
        )
        return ok({"payment": serialize(payment), "message": "Payment approved successfully."})

    @app.route("/admin/payments/<int:payment_id>/reject", methods=["POST"], endpoint="admin_reject_payment")
    @admin_required
    @json_endpoint
    def admin_reject_payment(payment_id: int):
        payment = container.payment_service.reject_cash_payment(
            current_role=current_role(),
            admin_user_id=current_user_id(),
            payment_id=payment_id,
            note=json_body().get("note"),
        )
        return ok({"payment": serialize(payment), "message": "Payment rejected successfully."})
