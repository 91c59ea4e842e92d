"""Presentation metadata for appointment statuses"""

from ...models import AppointmentStatus

STATUS_DISPLAY = {
    AppointmentStatus.PENDING: {"label": "Pending", "color": "warning", "icon": "bi-clock"},
    AppointmentStatus.CONFIRMED: {"label": "Confirmed", "color": "primary", "icon": "bi-check-circle"},
    AppointmentStatus.IN_PROGRESS: {"label": "In Progress", "color": "info", "icon": "bi-gear"},
    AppointmentStatus.COMPLETED: {"label": "Completed", "color": "success", "icon": "bi-check-all"},
    AppointmentStatus.CANCELLED: {"label": "Cancelled", "color": "danger", "icon": "bi-x-circle"},
}


def status_display(status: AppointmentStatus) -> dict:
    return {"value": status.value, **STATUS_DISPLAY[status]}
