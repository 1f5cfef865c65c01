import logging
from decimal import Decimal

import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import BotoCoreError, ClientError

from . import config
from .enums.guest_status import GuestStatus
from .exceptions import BackendError

logger = logging.getLogger(__name__)

# Initialize DynamoDB resource
dynamodb = boto3.resource(
    "dynamodb",
    aws_access_key_id=config.AWS_ACCESS_KEY,
    aws_secret_access_key=config.AWS_SECRET_KEY,
    region_name=config.AWS_REGION,
)

events_table = dynamodb.Table(config.EVENTS_TABLE)
guests_table = dynamodb.Table(config.GUESTS_TABLE)
rsvps_table = dynamodb.Table(config.RSVPS_TABLE)

BACKEND_ERRORS = (BotoCoreError, ClientError)


# === Helpers ===

def _from_dynamo(value):
    """DynamoDB hands numbers back as Decimal; turn them into int/float."""
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: _from_dynamo(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_from_dynamo(v) for v in value]
    return value


def _scan_all(table, filter_expression=None) -> list:
    """Scan a table following LastEvaluatedKey until every page is read."""
    kwargs = {}
    if filter_expression is not None:
        kwargs["FilterExpression"] = filter_expression

    items = []
    while True:
        response = table.scan(**kwargs)
        items.extend(response.get("Items", []))
        last_key = response.get("LastEvaluatedKey")
        if not last_key:
            break
        kwargs["ExclusiveStartKey"] = last_key
    return [_from_dynamo(item) for item in items]


def _newest_first(items: list) -> list:
    return sorted(items, key=lambda item: item.get("created_at") or "", reverse=True)


def _update(table, key: dict, fields: dict, condition=None):
    """
    SET every field of `fields` on the item identified by `key`.

    Returns:
        dict: The updated item, or None when `condition` did not hold.
    """
    names = {f"#f{i}": name for i, name in enumerate(fields)}
    values = {f":v{i}": value for i, value in enumerate(fields.values())}
    expression = "SET " + ", ".join(f"#f{i} = :v{i}" for i in range(len(fields)))

    kwargs = {
        "Key": key,
        "UpdateExpression": expression,
        "ExpressionAttributeNames": names,
        "ExpressionAttributeValues": values,
        "ReturnValues": "ALL_NEW",
    }
    if condition is not None:
        kwargs["ConditionExpression"] = condition

    try:
        response = table.update_item(**kwargs)
    except ClientError as e:
        if e.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
            return None
        raise
    return _from_dynamo(response.get("Attributes", {}))


# === Event-related database operations ===

def save_event(event_item: dict):
    """
    Save a new event to DynamoDB.

    Args:
        event_item (dict): The event row to be saved.
    """
    try:
        events_table.put_item(Item=event_item)
        logger.info("Event %s saved for user %s", event_item.get("id"), event_item.get("user_id"))
    except BACKEND_ERRORS as e:
        raise BackendError(f"Failed to save event to DynamoDB: {str(e)}") from e


def get_event_by_id(event_id: str):
    """
    Fetch an event by its id from DynamoDB.

    Args:
        event_id (str): The unique event ID.

    Returns:
        dict: The event data, or None.
    """
    try:
        response = events_table.get_item(Key={"id": event_id})
    except BACKEND_ERRORS as e:
        raise BackendError(f"Error fetching event by ID: {str(e)}") from e
    item = response.get("Item")
    return _from_dynamo(item) if item else None


def fetch_events_by_user(user_id: str) -> list:
    """
    Fetch all events of an organizer, newest first.
    """
    try:
        events = _scan_all(events_table, Attr("user_id").eq(user_id))
    except BACKEND_ERRORS as e:
        raise BackendError(f"Error fetching events from DynamoDB: {str(e)}") from e
    return _newest_first(events)


def get_latest_event(user_id: str, with_invitation: bool = False):
    """
    Return the most recently created event of an organizer.

    Args:
        user_id (str): The organizer id.
        with_invitation (bool): Only consider events that already have an invitation image.

    Returns:
        dict: The event, or None.
    """
    events = fetch_events_by_user(user_id)
    if with_invitation:
        events = [event for event in events if event.get("invitation_path")]
    return events[0] if events else None


def update_event_details(event_id: str, event_type: str, event_details: dict):
    try:
        return _update(events_table, {"id": event_id},
                       {"event_type": event_type, "event_details": event_details})
    except BACKEND_ERRORS as e:
        raise BackendError(f"Error updating event details: {str(e)}") from e


def update_event_design(event_id: str, invitation_path: str, font: str, event_details: dict):
    """
    Record the chosen design on an event.

    Args:
        event_id (str): The unique event ID.
        invitation_path (str): Storage key of the composed invitation.
        font (str): The chosen font key.
        event_details (dict): Details including the final invitation text.
    """
    try:
        return _update(events_table, {"id": event_id}, {
            "invitation_path": invitation_path,
            "font": font,
            "event_details": event_details,
        })
    except BACKEND_ERRORS as e:
        raise BackendError(f"Error updating event design: {str(e)}") from e


# === Invited guests ===

def add_invited_guest(guest_item: dict):
    try:
        guests_table.put_item(Item=guest_item)
    except BACKEND_ERRORS as e:
        raise BackendError(f"Failed to save guest to DynamoDB: {str(e)}") from e
    return guest_item


def get_guest(event_id: str, guest_id: str):
    """
    Fetch an invited guest, only if it belongs to the given event.
    """
    try:
        response = guests_table.get_item(Key={"id": guest_id})
    except BACKEND_ERRORS as e:
        raise BackendError(f"Error fetching guest: {str(e)}") from e
    item = response.get("Item")
    if not item or item.get("event_id") != event_id:
        return None
    return _from_dynamo(item)


def update_guest_rsvp(event_id: str, guest_id: str, fields: dict):
    """
    Store a guest's RSVP answer.

    Returns:
        dict: The updated guest, or None when the guest is not part of the event.
    """
    try:
        return _update(guests_table, {"id": guest_id}, fields,
                       condition=Attr("event_id").eq(event_id))
    except BACKEND_ERRORS as e:
        raise BackendError(f"Error updating guest RSVP: {str(e)}") from e


def fetch_guests_by_event(event_id: str) -> list:
    try:
        return _newest_first(_scan_all(guests_table, Attr("event_id").eq(event_id)))
    except BACKEND_ERRORS as e:
        raise BackendError(f"Error fetching guests from DynamoDB: {str(e)}") from e


def fetch_guests_by_status(user_id: str, status: GuestStatus, event_id: str = None) -> list:
    """
    Fetch an organizer's guests with a given response status.

    A guest without a status (or with an empty one) counts as pending.
    """
    status = GuestStatus(status)
    if status == GuestStatus.PENDING:
        status_filter = Attr("status").not_exists() | Attr("status").eq("") | Attr("status").eq(status.value)
    else:
        status_filter = Attr("status").eq(status.value)

    condition = Attr("user_id").eq(user_id) & status_filter
    if event_id:
        condition = condition & Attr("event_id").eq(event_id)

    try:
        guests = _scan_all(guests_table, condition)
    except BACKEND_ERRORS as e:
        raise BackendError(f"Error fetching {status.value} guests: {str(e)}") from e
    return sorted(guests, key=lambda guest: guest.get("created_at") or "")


SEARCH_FIELDS = ("first_name", "last_name", "phone")


def search_guests(user_id: str, term: str) -> list:
    """
    Find an organizer's guests whose first name, last name or phone contains
    `term`, ignoring case. DynamoDB's contains() is case-sensitive, so the
    match runs over the organizer's scanned guests.
    """
    needle = term.casefold()
    try:
        guests = _scan_all(guests_table, Attr("user_id").eq(user_id))
    except BACKEND_ERRORS as e:
        raise BackendError(f"Error searching guests: {str(e)}") from e
    matches = [guest for guest in guests
               if any(needle in str(guest.get(field) or "").casefold() for field in SEARCH_FIELDS)]
    return _newest_first(matches)


def get_latest_guest(user_id: str):
    try:
        guests = _scan_all(guests_table, Attr("user_id").eq(user_id))
    except BACKEND_ERRORS as e:
        raise BackendError(f"Error fetching latest guest: {str(e)}") from e
    guests = _newest_first(guests)
    return guests[0] if guests else None


# === Organizer RSVP submissions ===

def save_rsvp_submission(item: dict):
    try:
        rsvps_table.put_item(Item=item)
    except BACKEND_ERRORS as e:
        raise BackendError(f"Failed to save RSVP submission: {str(e)}") from e
    return item


def fetch_rsvp_submissions(user_id: str, event_id: str = None) -> list:
    condition = Attr("user_id").eq(user_id)
    if event_id:
        condition = condition & Attr("event_id").eq(event_id)
    try:
        return _newest_first(_scan_all(rsvps_table, condition))
    except BACKEND_ERRORS as e:
        raise BackendError(f"Error fetching RSVP submissions: {str(e)}") from e
