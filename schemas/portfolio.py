# ============================================================================
# PORTFOLIO SCHEMA
# ============================================================================
# Pydantic classes for managing attributes and validation of portfolio
# documents in and out of the MongoDB database. Sections are embedded in the
# portfolio document; see schemas/sections.py.
# ============================================================================

from pydantic import AliasChoices

from schemas.imports import *
from schemas.sections import Section
from services.portfolio_normalization import normalize_datetime


class PortfolioTheme(BaseModel):
    primaryColor: str = "#2563eb"
    secondaryColor: str = "#1e40af"
    fontFamily: str = "Inter"
    backgroundColor: str = "#ffffff"
    textColor: str = "#111827"


class SeoSettings(BaseModel):
    title: str = ""
    description: str = ""
    keywords: List[str] = Field(default_factory=list)


class AnalyticsSettings(BaseModel):
    googleAnalyticsId: Optional[str] = None


class PortfolioSettings(BaseModel):
    seo: SeoSettings = Field(default_factory=SeoSettings)
    domain: Optional[str] = None
    analytics: Optional[AnalyticsSettings] = None


class PortfolioBase(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    userId: str = Field(validation_alias=AliasChoices("userId", "user_id"))
    name: str
    slug: str
    sections: List[Section] = Field(default_factory=list)
    theme: PortfolioTheme = Field(default_factory=PortfolioTheme)
    settings: PortfolioSettings = Field(default_factory=PortfolioSettings)
    status: PortfolioStatus = PortfolioStatus.DRAFT
    deploymentUrl: Optional[str] = None
    githubRepo: Optional[str] = None


class PortfolioCreate(PortfolioBase):
    createdAt: datetime
    updatedAt: datetime
    version: int = 1


class PortfolioCreateRequest(BaseModel):
    name: Optional[str] = None


class PortfolioDuplicateRequest(BaseModel):
    name: Optional[str] = None


class PortfolioUpdate(BaseModel):
    """Fields a client may replace. Anything else in the body is ignored.

    `version`, when sent, is the version the client last saw; the write only
    lands if the stored document still has it.
    """

    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    sections: Optional[List[Section]] = None
    theme: Optional[PortfolioTheme] = None
    settings: Optional[PortfolioSettings] = None
    deploymentUrl: Optional[str] = None
    githubRepo: Optional[str] = None
    version: Optional[int] = Field(default=None, ge=1)

    @field_validator("sections", "theme", "settings", mode="before")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class PortfolioOut(PortfolioBase):
    id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("_id", "id"),
    )
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None
    publishedAt: Optional[datetime] = None
    version: int = 1

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    @model_validator(mode="before")
    @classmethod
    def convert_objectid(cls, values):
        if isinstance(values, dict) and "_id" in values and isinstance(values["_id"], ObjectId):
            values = {**values, "_id": str(values["_id"])}  # coerce to string before validation
        return values

    @field_validator("createdAt", "updatedAt", "publishedAt", mode="before")
    @classmethod
    def normalize_dates(cls, value):
        return normalize_datetime(value)
