from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_EVENT_TIME = "19:30"
DEFAULT_CHUPPAH_TIME = "21:00"
DEFAULT_EVENT_DESCRIPTION = "תיאור האירוע"
DEFAULT_FONT_KEY = "assistant"


class EventDetails(BaseModel):
    """
    The event detail form. Keys travel (and are stored) in camelCase,
    e.g. ``brideName``, ``birthdayAge``.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    bride_name: str = ""
    groom_name: str = ""
    bride_parents: str = ""
    groom_parents: str = ""
    boy_name: str = ""
    boy_parents: str = ""
    girl_name: str = ""
    girl_parents: str = ""
    baby_parents: str = ""
    birthday_name: str = ""
    birthday_age: str = ""
    business_name: str = ""
    business_contact: str = ""
    date: str = ""  # Format: YYYY-MM-DD
    time: str = DEFAULT_EVENT_TIME
    chuppah_time: str = DEFAULT_CHUPPAH_TIME
    hall_name: str = ""
    hall_address: str = ""
    custom_event_description: str = DEFAULT_EVENT_DESCRIPTION

    @field_validator("*", mode="before")
    @classmethod
    def _as_text(cls, value):
        if value is None:
            return ""
        if isinstance(value, (int, float)):
            return str(value)
        return value


class EventRequest(BaseModel):
    event_type: str
    details: EventDetails = Field(default_factory=EventDetails)


class DesignRequest(BaseModel):
    design_id: int
    font_key: str = DEFAULT_FONT_KEY
    invitation_text: Optional[str] = None


class GuestInvite(BaseModel):
    first_name: str = ""
    last_name: str = ""
    phone: str = ""
    email: str = ""
    channel: Literal["whatsapp", "sms"] = "whatsapp"
    event_id: Optional[str] = None


class MealCount(BaseModel):
    adults: int = 0
    children: int = 0


class SpecialMeals(BaseModel):
    vegetarian: MealCount = Field(default_factory=MealCount)
    vegan: MealCount = Field(default_factory=MealCount)
    glatt: MealCount = Field(default_factory=MealCount)


class Allergy(BaseModel):
    description: str = ""
    adults: int = 0
    children: int = 0


class Headcount(BaseModel):
    adults: int = 1
    children: int = 0
    special_meals: SpecialMeals = Field(default_factory=SpecialMeals)
    allergies: List[Allergy] = Field(default_factory=lambda: [Allergy()])


class RsvpResponse(Headcount):
    # None until the guest picks "coming" / "not coming"
    attending: Optional[bool] = None


class HeadcountSubmission(Headcount):
    event_id: Optional[str] = None


class SignUpRequest(BaseModel):
    email: str
    password: str
    password_confirm: str


class Credentials(BaseModel):
    email: str
    password: str


class CurrentUser(BaseModel):
    id: str
    email: Optional[str] = None
