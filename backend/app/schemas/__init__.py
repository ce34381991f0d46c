"""Pydantic schemas for the LodgeFlow API."""

from app.schemas.studio import *
from app.schemas.resident import *
from app.schemas.invoice import *
from app.schemas.lead import *
from app.schemas.audit import *
