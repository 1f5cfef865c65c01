import copy
from datetime import date, timedelta

import pytest
from boto3.dynamodb.conditions import AttributeBase
from botocore.exceptions import ClientError
from fastapi.testclient import TestClient
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen

from inviteme import cognito_service, dynamodb_service, s3_service
from inviteme.designs import FONTS
from inviteme.main import app
from inviteme.models import CurrentUser
from inviteme.routers import guests as guests_router
from inviteme.routers.auth import get_current_user

_MISSING = object()

FUTURE_DATE = (date.today() + timedelta(days=60)).isoformat()


def _operand(value, item):
    if isinstance(value, AttributeBase):
        return item.get(value.name, _MISSING)
    return value


def evaluate(condition, item) -> bool:
    """Evaluate a boto3 condition expression against a plain dict item."""
    expression = condition.get_expression()
    operator = expression["operator"]
    values = expression["values"]

    if operator == "AND":
        return evaluate(values[0], item) and evaluate(values[1], item)
    if operator == "OR":
        return evaluate(values[0], item) or evaluate(values[1], item)
    if operator == "NOT":
        return not evaluate(values[0], item)
    if operator == "attribute_not_exists":
        return values[0].name not in item
    if operator == "attribute_exists":
        return values[0].name in item

    left, right = _operand(values[0], item), _operand(values[1], item)
    if operator == "=":
        return left == right
    if operator == "<>":
        return left != right
    if operator == "contains":
        return left not in (_MISSING, None) and right in left
    raise NotImplementedError(operator)


def client_error(code: str, operation: str = "Operation") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class FakeTable:
    """Just enough of a DynamoDB Table resource for the service module."""

    def __init__(self, key: str = "id", page_size: int = None):
        self.key = key
        self.page_size = page_size
        self.items = {}
        self.error = None

    def _check(self):
        if self.error:
            raise self.error

    def put_item(self, Item):
        self._check()
        self.items[Item[self.key]] = copy.deepcopy(Item)
        return {}

    def get_item(self, Key):
        self._check()
        item = self.items.get(Key[self.key])
        return {"Item": copy.deepcopy(item)} if item else {}

    def scan(self, FilterExpression=None, ExclusiveStartKey=None):
        self._check()
        keys = list(self.items)
        start = keys.index(ExclusiveStartKey[self.key]) + 1 if ExclusiveStartKey else 0
        end = start + self.page_size if self.page_size else len(keys)
        page = [self.items[k] for k in keys[start:end]]

        response = {"Items": [copy.deepcopy(i) for i in page
                              if FilterExpression is None or evaluate(FilterExpression, i)]}
        if end < len(keys):
            response["LastEvaluatedKey"] = {self.key: keys[end - 1]}
        return response

    def update_item(self, Key, UpdateExpression, ExpressionAttributeNames, ExpressionAttributeValues,
                    ConditionExpression=None, ReturnValues=None):
        self._check()
        item = self.items.get(Key[self.key])
        if ConditionExpression is not None and (item is None or not evaluate(ConditionExpression, item)):
            raise client_error("ConditionalCheckFailedException", "UpdateItem")
        if item is None:
            item = dict(Key)
            self.items[Key[self.key]] = item

        assert UpdateExpression.startswith("SET ")
        for assignment in UpdateExpression[len("SET "):].split(", "):
            name, value = [part.strip() for part in assignment.split("=")]
            item[ExpressionAttributeNames[name]] = copy.deepcopy(ExpressionAttributeValues[value])
        return {"Attributes": copy.deepcopy(item)}


class FakeS3:
    def __init__(self):
        self.uploads = []
        self.error = None

    def upload_fileobj(self, fileobj, bucket, key, ExtraArgs=None):
        if self.error:
            raise self.error
        self.uploads.append({"bucket": bucket, "key": key, "body": fileobj.read(), "extra": ExtraArgs})


class FakeCognito:
    def __init__(self):
        self.users = {}
        self.tokens = {}
        self.signed_out = []

    def add_user(self, email, password, sub):
        self.users[email] = {"password": password, "sub": sub}

    def sign_up(self, ClientId, Username, Password, UserAttributes=None):
        if Username in self.users:
            raise client_error("UsernameExistsException", "SignUp")
        sub = f"sub-{len(self.users) + 1}"
        self.add_user(Username, Password, sub)
        return {"UserSub": sub, "UserConfirmed": False}

    def initiate_auth(self, ClientId, AuthFlow, AuthParameters):
        user = self.users.get(AuthParameters["USERNAME"])
        if not user or user["password"] != AuthParameters["PASSWORD"]:
            raise client_error("NotAuthorizedException", "InitiateAuth")
        token = f"token-{user['sub']}"
        self.tokens[token] = AuthParameters["USERNAME"]
        return {"AuthenticationResult": {"AccessToken": token, "IdToken": "id", "RefreshToken": "refresh",
                                         "ExpiresIn": 3600, "TokenType": "Bearer"}}

    def get_user(self, AccessToken):
        email = self.tokens.get(AccessToken)
        if not email:
            raise client_error("NotAuthorizedException", "GetUser")
        return {"Username": email, "UserAttributes": [
            {"Name": "sub", "Value": self.users[email]["sub"]},
            {"Name": "email", "Value": email},
        ]}

    def global_sign_out(self, AccessToken):
        if AccessToken not in self.tokens:
            raise client_error("NotAuthorizedException", "GlobalSignOut")
        self.signed_out.append(self.tokens.pop(AccessToken))
        return {}


class Tables:
    def __init__(self):
        self.events = FakeTable()
        self.guests = FakeTable()
        self.rsvps = FakeTable()


@pytest.fixture(autouse=True)
def tables(monkeypatch):
    fake = Tables()
    monkeypatch.setattr(dynamodb_service, "events_table", fake.events)
    monkeypatch.setattr(dynamodb_service, "guests_table", fake.guests)
    monkeypatch.setattr(dynamodb_service, "rsvps_table", fake.rsvps)
    return fake


@pytest.fixture(autouse=True)
def s3(monkeypatch):
    fake = FakeS3()
    monkeypatch.setattr(s3_service, "s3_client", fake)
    return fake


@pytest.fixture(autouse=True)
def cognito(monkeypatch):
    fake = FakeCognito()
    monkeypatch.setattr(cognito_service, "cognito_client", fake)
    return fake


@pytest.fixture(autouse=True)
def clear_sent_guests():
    guests_router.sent_guests.clear()
    yield
    guests_router.sent_guests.clear()


@pytest.fixture
def organizer():
    return CurrentUser(id="user-1", email="organizer@example.com")


@pytest.fixture
def client(organizer):
    app.dependency_overrides[get_current_user] = lambda: organizer
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def anon_client():
    app.dependency_overrides.clear()
    return TestClient(app)


def wedding_details(**overrides) -> dict:
    details = {
        "brideName": "נועה",
        "groomName": "איתי",
        "brideParents": "משפחת כהן",
        "groomParents": "משפחת לוי",
        "date": FUTURE_DATE,
        "time": "19:30",
        "chuppahTime": "21:00",
        "hallName": "אולמי הגן",
        "hallAddress": "רחוב הפרחים 1, תל אביב",
        "customEventDescription": "תיאור האירוע",
    }
    details.update(overrides)
    return details


@pytest.fixture
def make_event(tables, organizer):
    def _make(event_id="event-1", user_id=None, created_at="2026-01-01T10:00:00+00:00", **fields):
        item = {
            "id": event_id,
            "user_id": user_id or organizer.id,
            "event_type": "חתונה",
            "event_details": wedding_details(),
            "font": "assistant",
            "created_at": created_at,
        }
        item.update(fields)
        tables.events.put_item(Item=item)
        return item
    return _make


@pytest.fixture
def make_guest(tables, organizer):
    def _make(guest_id="guest-1", event_id="event-1", user_id=None,
              created_at="2026-01-02T10:00:00+00:00", **fields):
        item = {
            "id": guest_id,
            "user_id": user_id or organizer.id,
            "event_id": event_id,
            "first_name": "דנה",
            "last_name": "ישראלי",
            "phone": "050-123-4567",
            "status": "pending",
            "total_guests": 1,
            "adults": 1,
            "children": 0,
            "created_at": created_at,
        }
        item.update(fields)
        tables.guests.put_item(Item=item)
        return item
    return _make


def _box_glyph(top: int):
    pen = TTGlyphPen(None)
    pen.moveTo((50, 0))
    pen.lineTo((50, top))
    pen.lineTo((450, top))
    pen.lineTo((450, 0))
    pen.closePath()
    return pen.glyph()


def build_test_font(path):
    """
    Write a TrueType font covering printable ASCII and the Hebrew letters.

    Every letter is a filled box of its own height, so two different strings
    never render alike. Space and "." are blank.
    """
    heights = {" ": None, ".": None}
    codepoints = list(range(0x21, 0x7F)) + list(range(0x05D0, 0x05EB))
    for idx, codepoint in enumerate(codepoints):
        if chr(codepoint) != ".":
            heights[chr(codepoint)] = 200 + (idx % 30) * 20
    names = {char: f"uni{ord(char):04X}" for char in heights}

    builder = FontBuilder(1000, isTTF=True)
    builder.setupGlyphOrder([".notdef"] + list(names.values()))
    builder.setupCharacterMap({ord(char): name for char, name in names.items()})

    glyphs = {".notdef": TTGlyphPen(None).glyph()}
    metrics = {".notdef": (500, 0)}
    for char, name in names.items():
        top = heights[char]
        glyphs[name] = _box_glyph(top) if top else TTGlyphPen(None).glyph()
        metrics[name] = (500, 50 if top else 0)

    builder.setupGlyf(glyphs)
    builder.setupHorizontalMetrics(metrics)
    builder.setupHorizontalHeader(ascent=800, descent=-200)
    builder.setupNameTable({"familyName": "InviteMe Test", "styleName": "Regular"})
    builder.setupOS2(sTypoAscender=800, sTypoDescender=-200, usWinAscent=800, usWinDescent=200)
    builder.setupPost()
    builder.save(str(path))


@pytest.fixture(scope="session")
def hebrew_font_bytes(tmp_path_factory):
    path = tmp_path_factory.mktemp("font") / "test.ttf"
    build_test_font(path)
    return path.read_bytes()


@pytest.fixture
def fonts_dir(tmp_path, hebrew_font_bytes):
    """A fonts directory holding a Hebrew-capable TTF under every catalogue file name."""
    directory = tmp_path / "fonts"
    directory.mkdir()
    for font in FONTS.values():
        (directory / font["file"]).write_bytes(hebrew_font_bytes)
    return str(directory)
