"""Request bodies for the HTTP API (camelCase on the wire)."""

from pydantic import BaseModel, ConfigDict, Field


class ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SubscriptionKeys(ApiModel):
    p256dh: str | None = None
    auth: str | None = None


class SubscriptionBody(ApiModel):
    endpoint: str | None = None
    keys: SubscriptionKeys | None = None


class ReminderBody(ApiModel):
    habit_id: str = Field(alias="habitId")
    habit_name: str | None = Field(default=None, alias="habitName")
    hour: int
    minute: int


class GlobalReminderBody(ApiModel):
    enabled: bool = False
    hour: int
    minute: int


class SubscribeRequest(ApiModel):
    subscription: SubscriptionBody | None = None
    reminders: list[ReminderBody] | None = None
    global_reminder: GlobalReminderBody | None = Field(default=None, alias="globalReminder")


class UnsubscribeRequest(ApiModel):
    endpoint: str | None = None
    all_devices: bool = Field(default=False, alias="allDevices")


class SettingsRequest(ApiModel):
    global_reminder_enabled: bool = Field(default=False, alias="globalReminderEnabled")
    global_reminder_hour: int | None = Field(default=None, alias="globalReminderHour")
    global_reminder_minute: int | None = Field(default=None, alias="globalReminderMinute")


class HabitCreateRequest(ApiModel):
    id: str | None = None
    name: str
    reminder_enabled: bool = Field(default=False, alias="reminderEnabled")
    reminder_hour: int | None = Field(default=None, alias="reminderHour")
    reminder_minute: int | None = Field(default=None, alias="reminderMinute")


class HabitUpdateRequest(ApiModel):
    name: str | None = None
    reminder_enabled: bool | None = Field(default=None, alias="reminderEnabled")
    reminder_hour: int | None = Field(default=None, alias="reminderHour")
    reminder_minute: int | None = Field(default=None, alias="reminderMinute")
    is_archived: bool | None = Field(default=None, alias="isArchived")
