from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class PortfolioStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class SectionType(str, Enum):
    NAVIGATION = "navigation"
    HERO = "hero"
    ABOUT = "about"
    PROJECTS = "projects"
    SKILLS = "skills"
    EXPERIENCE = "experience"
    EDUCATION = "education"
    CONTACT = "contact"
    TESTIMONIALS = "testimonials"
    GALLERY = "gallery"
