"""Action protocol schemas - discovery, descriptor and post payloads"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, StrictStr


class ActionRule(BaseModel):
    pathPattern: str
    apiPath: str


class ActionsManifest(BaseModel):
    rules: list[ActionRule]


class ActionParameter(BaseModel):
    name: str
    label: str
    type: Literal["text", "email", "textarea"] = "text"
    required: bool = False
    layout: Optional[Literal["row"]] = None


class LinkedAction(BaseModel):
    type: Literal["transaction"] = "transaction"
    href: str
    label: str
    parameters: list[ActionParameter] = []


class ActionLinks(BaseModel):
    actions: list[LinkedAction]


class ActionGetResponse(BaseModel):
    type: Literal["action"] = "action"
    icon: str
    title: str
    description: str
    label: str
    disabled: Optional[bool] = None
    links: Optional[ActionLinks] = None


class ActionPostRequest(BaseModel):
    account: StrictStr
    data: Optional[Any] = None  # form fields; non-string values are ignored


class ActionPostResponse(BaseModel):
    type: Literal["transaction"] = "transaction"
    transaction: str  # base64 wire bytes of the unsigned transaction
    message: Optional[str] = None
