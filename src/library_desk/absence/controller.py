from __future__ import annotations

from flask import Flask, jsonify, request

from ..app_logger import get_logger
from ..common.http import date_arg, error_response, json_body
from ..container import Container
from ..core.exceptions import ValidationError

logger = get_logger("absence")


def register(app: Flask, container: Container) -> None:
    def run_check(raw_date):
        try:
            check_date = date_arg(raw_date)
        except ValidationError as e:
            return error_response(e)

        try:
            report = container.absence_detector.run(check_date)
        except Exception:
            logger.exception("Error checking absent students")
            return jsonify({"success": False, "error": "Failed to check absent students"}), 500

        return jsonify(
            {
                "success": True,
                "date": report.date.isoformat(),
                "absentCount": report.absent_count,
                "absentStudents": [s.to_dict() for s in report.absent_students],
            }
        )

    @app.route("/check-absent-students", methods=["POST"], endpoint="check_absent_students")
    def check_absent_students():
        return run_check(json_body().get("date"))

    @app.route("/check-absent-students", methods=["GET"], endpoint="check_absent_students_get")
    def check_absent_students_get():
        # same handler as POST, date taken from the query string
        return run_check(request.args.get("date"))
