from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .absence.service import AbsenceDetector
from .admissions.mysql_admission_repository import MySQLAdmissionRepository
from .admissions.repository import AdmissionRepository
from .admissions.service import AdmissionService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .bookings.mysql_booking_repository import MySQLBookingRepository
from .bookings.repository import BookingRepository
from .bookings.service import BookingService
from .database.connection import DBConfig, DatabaseConnection
from .notifications.mysql_audit_repository import MySQLAuditLogRepository
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .notifications.repository import AuditLogRepository, NotificationRepository
from .notifications.service import AuditTrail, NotificationService
from .payments.mysql_cash_payment_repository import MySQLCashPaymentRepository
from .payments.mysql_payment_history_repository import MySQLPaymentHistoryRepository
from .payments.repository import CashPaymentRepository, PaymentHistoryRepository
from .payments.service import PaymentService
from .shifts.catalog import ShiftCatalog
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]
    catalog: ShiftCatalog

    users_repo: UserRepository
    admissions_repo: AdmissionRepository
    bookings_repo: BookingRepository
    attendance_repo: AttendanceRepository
    cash_payments_repo: CashPaymentRepository
    payment_history_repo: PaymentHistoryRepository
    notifications_repo: NotificationRepository
    audit_repo: AuditLogRepository

    notification_service: NotificationService
    audit_trail: AuditTrail
    auth_service: AuthService
    user_service: UserService
    admission_service: AdmissionService
    booking_service: BookingService
    attendance_service: AttendanceService
    payment_service: PaymentService
    absence_detector: AbsenceDetector


def wire_services(
    *,
    users_repo: UserRepository,
    admissions_repo: AdmissionRepository,
    bookings_repo: BookingRepository,
    attendance_repo: AttendanceRepository,
    cash_payments_repo: CashPaymentRepository,
    payment_history_repo: PaymentHistoryRepository,
    notifications_repo: NotificationRepository,
    audit_repo: AuditLogRepository,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    catalog = ShiftCatalog()

    notification_service = NotificationService(notifications_repo)
    audit_trail = AuditTrail(audit_repo)
    auth_service = AuthService(users_repo)
    user_service = UserService(users_repo, notification_service, audit_trail)
    admission_service = AdmissionService(admissions_repo, catalog, audit=audit_trail)
    booking_service = BookingService(bookings_repo, cash_payments_repo, admission_service, catalog)
    attendance_service = AttendanceService(attendance_repo, admission_service, catalog)
    payment_service = PaymentService(
        cash_payments_repo,
        payment_history_repo,
        admissions_repo,
        booking_service,
        notification_service,
        audit_trail,
    )
    absence_detector = AbsenceDetector(admissions_repo, attendance_repo, catalog)

    return Container(
        conn=conn,
        catalog=catalog,
        users_repo=users_repo,
        admissions_repo=admissions_repo,
        bookings_repo=bookings_repo,
        attendance_repo=attendance_repo,
        cash_payments_repo=cash_payments_repo,
        payment_history_repo=payment_history_repo,
        notifications_repo=notifications_repo,
        audit_repo=audit_repo,
        notification_service=notification_service,
        audit_trail=audit_trail,
        auth_service=auth_service,
        user_service=user_service,
        admission_service=admission_service,
        booking_service=booking_service,
        attendance_service=attendance_service,
        payment_service=payment_service,
        absence_detector=absence_detector,
    )


def build_container(*, db_config: Mapping[str, Any]) -> Container:
    config = DBConfig.from_mapping(db_config)
    conn = DatabaseConnection.get_instance(config)

    return wire_services(
        conn=conn,
        users_repo=MySQLUserRepository(conn),
        admissions_repo=MySQLAdmissionRepository(conn),
        bookings_repo=MySQLBookingRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        cash_payments_repo=MySQLCashPaymentRepository(conn),
        payment_history_repo=MySQLPaymentHistoryRepository(conn),
        notifications_repo=MySQLNotificationRepository(conn),
        audit_repo=MySQLAuditLogRepository(conn),
    )
