"""
Message templates for workflow notifications.

Each stage yields (subject, plain-text body, HTML body). Bodies embed the
identifying fields of the record and a deep link into the frontend.
"""

from enum import Enum

from django.utils.html import format_html, format_html_join


class NotificationStage(str, Enum):
    MANAGER_REVIEW = "MANAGER_REVIEW"
    TTO_REVIEW = "TTO_REVIEW"
    ENGINEER_REVIEW = "ENGINEER_REVIEW"
    REQUEST_APPROVED = "REQUEST_APPROVED"
    SELLER_ORDER = "SELLER_ORDER"
    ORDER_CONFIRMED = "ORDER_CONFIRMED"
    ORDER_REJECTED = "ORDER_REJECTED"


REQUEST_STAGES = (
    NotificationStage.MANAGER_REVIEW,
    NotificationStage.TTO_REVIEW,
    NotificationStage.ENGINEER_REVIEW,
    NotificationStage.REQUEST_APPROVED,
)


def deep_link(stage, record, frontend_url):
    base = (frontend_url or "").rstrip("/")
    links = {
        NotificationStage.MANAGER_REVIEW: f"{base}/manager?requestId={record.id}",
        NotificationStage.TTO_REVIEW: f"{base}/tto?requestId={record.id}",
        NotificationStage.ENGINEER_REVIEW: f"{base}/engineer?requestId={record.id}",
        NotificationStage.REQUEST_APPROVED: f"{base}/order-tires/{record.id}",
        NotificationStage.SELLER_ORDER: f"{base}/seller",
        NotificationStage.ORDER_CONFIRMED: f"{base}/tire-order",
        NotificationStage.ORDER_REJECTED: f"{base}/tire-order",
    }
    return links[stage]


def _request_fields(record):
    return [
        ("Request ID", record.id),
        ("Vehicle Number", record.vehicle_no),
        ("Vehicle", " ".join(v for v in (record.vehicle_brand, record.vehicle_model) if v)),
        ("Section", record.user_section),
        ("Tire Size", record.tire_size),
        ("Number of Tires", record.no_of_tires),
        ("Requested By", record.email),
        ("Status", record.status),
    ]


def _order_fields(record):
    return [
        ("Order ID", record.id),
        ("Vehicle Number", record.vehicle_no),
        ("Tire", " ".join(v for v in (record.tire_brand, record.tire_size) if v)),
        ("Quantity", record.quantity),
        ("Delivery Address", record.delivery_address),
        ("Status", record.status),
    ]


def _subject(stage, record):
    subjects = {
        NotificationStage.MANAGER_REVIEW: "New Tire Request Awaiting Approval - {vehicle}",
        NotificationStage.TTO_REVIEW: (
            "Tire Request Approved by Manager - Awaiting TTO Review - {vehicle}"
        ),
        NotificationStage.ENGINEER_REVIEW: (
            "Tire Request - Final Engineering Approval Required - {vehicle}"
        ),
        NotificationStage.REQUEST_APPROVED: "Your Tire Request Has Been APPROVED! - {vehicle}",
        NotificationStage.SELLER_ORDER: "New Tire Order - Processing Required - Order #{id}",
        NotificationStage.ORDER_CONFIRMED: "Your Tire Order is Confirmed! Order ID: {id}",
        NotificationStage.ORDER_REJECTED: "Your Tire Order is Rejected - Order ID: {id}",
    }
    return subjects[stage].format(vehicle=record.vehicle_no, id=record.id)


INTROS = {
    NotificationStage.MANAGER_REVIEW: "A new tire replacement request is waiting for your approval.",
    NotificationStage.TTO_REVIEW: "The manager approved this tire request. It now needs TTO review.",
    NotificationStage.ENGINEER_REVIEW: (
        "The TTO approved this tire request. Final engineering approval is required."
    ),
    NotificationStage.REQUEST_APPROVED: (
        "Your tire request has been fully approved. You can now place the tire order."
    ),
    NotificationStage.SELLER_ORDER: "A new tire order has been placed and needs processing.",
    NotificationStage.ORDER_CONFIRMED: "Your tire order has been confirmed by the seller.",
    NotificationStage.ORDER_REJECTED: "Your tire order has been rejected by the seller.",
}

ACTION_LABELS = {
    NotificationStage.MANAGER_REVIEW: "Review request",
    NotificationStage.TTO_REVIEW: "Open TTO dashboard",
    NotificationStage.ENGINEER_REVIEW: "Open engineer dashboard",
    NotificationStage.REQUEST_APPROVED: "Order tires",
    NotificationStage.SELLER_ORDER: "Open seller dashboard",
    NotificationStage.ORDER_CONFIRMED: "View order",
    NotificationStage.ORDER_REJECTED: "View order",
}


def build_message(stage, record, frontend_url, **context):
    """
    Return (subject, text_body, html_body) for `stage` about `record`.

    Extra context (e.g. reason, notes) is appended as additional rows.
    """
    stage = NotificationStage(stage)
    fields = _request_fields(record) if stage in REQUEST_STAGES else _order_fields(record)
    for key, value in context.items():
        if value not in (None, ""):
            fields.append((key.replace("_", " ").capitalize(), value))
    fields = [(label, "" if value is None else value) for label, value in fields]

    link = deep_link(stage, record, frontend_url)
    intro = INTROS[stage]

    text_lines = [intro, ""]
    text_lines.extend(f"{label}: {value}" for label, value in fields)
    text_lines.extend(["", f"{ACTION_LABELS[stage]}: {link}"])
    text_body = "\n".join(text_lines)

    rows = format_html_join(
        "\n",
        "<tr><th align=\"left\">{}</th><td>{}</td></tr>",
        ((label, value) for label, value in fields),
    )
    html_body = format_html(
        "<html><body><p>{}</p><table>{}</table>"
        "<p><a href=\"{}\">{}</a></p></body></html>",
        intro,
        rows,
        link,
        ACTION_LABELS[stage],
    )

    return _subject(stage, record), text_body, str(html_body)
