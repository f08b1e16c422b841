# ============================================================================
# SECTION SCHEMA
# ============================================================================
# Pydantic classes for the blocks a portfolio page is built from.
# A section is a tagged union keyed by `type`; every variant owns a typed
# `data` model whose field defaults are the placeholder template a freshly
# dropped block starts with. Unknown keys in `data` are kept as-is.
# ============================================================================

from dataclasses import dataclass
from typing import Annotated, Type

from pydantic import AliasChoices, TypeAdapter

from core.ids import new_element_id
from schemas.imports import *


# ------------------------------
# Presentation records
# ------------------------------

class TextStyle(BaseModel):
    textAlign: Literal["left", "center", "right"] = "left"
    fontSize: Literal["xs", "sm", "base", "lg", "xl", "2xl", "3xl", "4xl", "5xl", "6xl"] = "base"
    fontWeight: Literal["normal", "medium", "semibold", "bold"] = "normal"
    color: str = "#000000"


class GradientSpec(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    start: str = Field(
        default="#2563eb",
        validation_alias=AliasChoices("from", "start"),
        serialization_alias="from",
    )
    end: str = Field(
        default="#7c3aed",
        validation_alias=AliasChoices("to", "end"),
        serialization_alias="to",
    )
    direction: Literal["to-r", "to-l", "to-t", "to-b", "to-br", "to-bl", "to-tr", "to-tl"] = "to-r"


class SectionBackground(BaseModel):
    type: Literal["solid", "gradient"] = "solid"
    color: Optional[str] = "#ffffff"
    gradient: Optional[GradientSpec] = None


def default_background() -> SectionBackground:
    return SectionBackground()


def _hero_background() -> SectionBackground:
    return SectionBackground(type="gradient", color="#2563eb", gradient=GradientSpec())


def _hero_styles() -> Dict[str, TextStyle]:
    return {
        "title": TextStyle(textAlign="center", fontSize="5xl", fontWeight="bold", color="#ffffff"),
        "subtitle": TextStyle(textAlign="center", fontSize="xl", fontWeight="medium", color="#ffffff"),
        "description": TextStyle(textAlign="center", fontSize="lg", fontWeight="normal", color="#ffffff"),
    }


# ------------------------------
# Nested list records
# ------------------------------

class NavLink(BaseModel):
    name: str
    href: str


class ProjectEntry(BaseModel):
    id: str = Field(default_factory=lambda: new_element_id("project"))
    title: str = "New Project"
    description: str = "Project description..."
    image: Optional[str] = None
    technologies: List[str] = Field(default_factory=list)
    liveUrl: Optional[str] = None
    githubUrl: Optional[str] = None
    featured: bool = False


class SkillEntry(BaseModel):
    id: str = Field(default_factory=lambda: new_element_id("skill"))
    name: str = "New Skill"
    level: int = Field(default=80, ge=0, le=100)
    category: str = "Technical"
    icon: Optional[str] = None


class ExperienceEntry(BaseModel):
    id: str = Field(default_factory=lambda: new_element_id("experience"))
    company: str = ""
    position: str = ""
    startDate: str = ""
    endDate: Optional[str] = None
    description: str = ""
    technologies: List[str] = Field(default_factory=list)
    isCurrentRole: bool = False


class EducationEntry(BaseModel):
    id: str = Field(default_factory=lambda: new_element_id("education"))
    institution: str = ""
    degree: str = ""
    field: str = ""
    startDate: str = ""
    endDate: Optional[str] = None
    description: Optional[str] = None
    gpa: Optional[str] = None


class SocialLink(BaseModel):
    platform: str
    url: str
    icon: str = ""


class TestimonialEntry(BaseModel):
    id: str = Field(default_factory=lambda: new_element_id("testimonial"))
    quote: str = ""
    author: str = ""
    role: str = ""
    avatar: Optional[str] = None


class GalleryImage(BaseModel):
    id: str = Field(default_factory=lambda: new_element_id("image"))
    src: str
    alt: str = ""
    caption: Optional[str] = None


# ------------------------------
# Per-type data variants
# ------------------------------

class SectionData(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    background: SectionBackground = Field(default_factory=default_background)
    styles: Dict[str, TextStyle] = Field(default_factory=dict)


class NavigationData(SectionData):
    title: str = "Navigation"
    items: List[NavLink] = Field(
        default_factory=lambda: [
            NavLink(name="Home", href="#home"),
            NavLink(name="About", href="#about"),
            NavLink(name="Projects", href="#projects"),
            NavLink(name="Contact", href="#contact"),
        ]
    )


class HeroData(SectionData):
    title: str = "Your Name"
    subtitle: str = "Your Professional Title"
    description: str = "Brief description about yourself"
    image: Optional[str] = None
    background: SectionBackground = Field(default_factory=_hero_background)
    styles: Dict[str, TextStyle] = Field(default_factory=_hero_styles)


class AboutData(SectionData):
    title: str = "About Me"
    content: str = "Tell your story and what makes you unique..."
    image: Optional[str] = None


class ProjectsData(SectionData):
    title: str = "My Projects"
    projects: List[ProjectEntry] = Field(
        default_factory=lambda: [
            ProjectEntry(
                title="Sample Project",
                description="A short description of what you built and the problem it solves.",
                technologies=["React", "TypeScript", "Node.js"],
                featured=True,
            )
        ]
    )


class SkillsData(SectionData):
    title: str = "Skills & Expertise"
    skills: List[SkillEntry] = Field(
        default_factory=lambda: [
            SkillEntry(name="JavaScript", level=90, category="Technical"),
            SkillEntry(name="React", level=85, category="Technical"),
            SkillEntry(name="UI Design", level=75, category="Design"),
        ]
    )


class ExperienceData(SectionData):
    title: str = "Experience"
    experiences: List[ExperienceEntry] = Field(
        default_factory=lambda: [
            ExperienceEntry(
                company="Company Name",
                position="Job Title",
                startDate="2022",
                description="What you worked on and the impact you had.",
                isCurrentRole=True,
            )
        ]
    )


class EducationData(SectionData):
    title: str = "Education"
    education: List[EducationEntry] = Field(
        default_factory=lambda: [
            EducationEntry(
                institution="University Name",
                degree="Bachelor of Science",
                field="Computer Science",
                startDate="2018",
                endDate="2022",
            )
        ]
    )


class ContactData(SectionData):
    title: str = "Get In Touch"
    email: str = "hello@example.com"
    phone: str = "+1 (555) 123-4567"
    location: str = "City, Country"
    social: Dict[str, SocialLink] = Field(default_factory=dict)


class TestimonialsData(SectionData):
    title: str = "Testimonials"
    testimonials: List[TestimonialEntry] = Field(
        default_factory=lambda: [
            TestimonialEntry(
                quote="Working together was a great experience from start to finish.",
                author="Client Name",
                role="Product Manager",
            )
        ]
    )


class GalleryData(SectionData):
    title: str = "Gallery"
    images: List[GalleryImage] = Field(default_factory=list)


# ------------------------------
# Section variants
# ------------------------------

class SectionBase(BaseModel):
    id: str = Field(default_factory=new_element_id)
    order: int = Field(default=0, ge=0)
    isVisible: bool = True


class NavigationSection(SectionBase):
    type: Literal["navigation"] = "navigation"
    data: NavigationData = Field(default_factory=NavigationData)


class HeroSection(SectionBase):
    type: Literal["hero"] = "hero"
    data: HeroData = Field(default_factory=HeroData)


class AboutSection(SectionBase):
    type: Literal["about"] = "about"
    data: AboutData = Field(default_factory=AboutData)


class ProjectsSection(SectionBase):
    type: Literal["projects"] = "projects"
    data: ProjectsData = Field(default_factory=ProjectsData)


class SkillsSection(SectionBase):
    type: Literal["skills"] = "skills"
    data: SkillsData = Field(default_factory=SkillsData)


class ExperienceSection(SectionBase):
    type: Literal["experience"] = "experience"
    data: ExperienceData = Field(default_factory=ExperienceData)


class EducationSection(SectionBase):
    type: Literal["education"] = "education"
    data: EducationData = Field(default_factory=EducationData)


class ContactSection(SectionBase):
    type: Literal["contact"] = "contact"
    data: ContactData = Field(default_factory=ContactData)


class TestimonialsSection(SectionBase):
    type: Literal["testimonials"] = "testimonials"
    data: TestimonialsData = Field(default_factory=TestimonialsData)


class GallerySection(SectionBase):
    type: Literal["gallery"] = "gallery"
    data: GalleryData = Field(default_factory=GalleryData)


Section = Annotated[
    Union[
        NavigationSection,
        HeroSection,
        AboutSection,
        ProjectsSection,
        SkillsSection,
        ExperienceSection,
        EducationSection,
        ContactSection,
        TestimonialsSection,
        GallerySection,
    ],
    Field(discriminator="type"),
]

SectionListAdapter = TypeAdapter(List[Section])


# ------------------------------
# Catalog: the one list of section types
# ------------------------------

@dataclass(frozen=True)
class SectionTypeInfo:
    """Palette metadata plus the concrete classes behind one section type."""

    type: SectionType
    name: str
    description: str
    model: Type[SectionBase]
    data_model: Type[SectionData]


SECTION_CATALOG: Dict[SectionType, SectionTypeInfo] = {
    info.type: info
    for info in (
        SectionTypeInfo(SectionType.NAVIGATION, "Navigation Bar", "Top navigation menu for your portfolio", NavigationSection, NavigationData),
        SectionTypeInfo(SectionType.HERO, "Hero Section", "Introduction with name and title", HeroSection, HeroData),
        SectionTypeInfo(SectionType.ABOUT, "About Section", "Tell your story and background", AboutSection, AboutData),
        SectionTypeInfo(SectionType.PROJECTS, "Projects", "Showcase your work and projects", ProjectsSection, ProjectsData),
        SectionTypeInfo(SectionType.SKILLS, "Skills", "Display your technical skills", SkillsSection, SkillsData),
        SectionTypeInfo(SectionType.EXPERIENCE, "Experience", "Your work experience and career", ExperienceSection, ExperienceData),
        SectionTypeInfo(SectionType.EDUCATION, "Education", "Educational background and certifications", EducationSection, EducationData),
        SectionTypeInfo(SectionType.TESTIMONIALS, "Testimonials", "Client and colleague recommendations", TestimonialsSection, TestimonialsData),
        SectionTypeInfo(SectionType.GALLERY, "Gallery", "Image gallery or portfolio showcase", GallerySection, GalleryData),
        SectionTypeInfo(SectionType.CONTACT, "Contact", "Contact information and social links", ContactSection, ContactData),
    )
}


def parse_section_type(value: Any) -> Optional[SectionType]:
    """Maps a raw type tag onto the enumeration, or None when it is not one."""
    if isinstance(value, SectionType):
        return value
    try:
        return SectionType(value)
    except ValueError:
        return None


class SectionTypeOut(BaseModel):
    type: SectionType
    name: str
    description: str


def section_palette() -> List[SectionTypeOut]:
    return [
        SectionTypeOut(type=info.type, name=info.name, description=info.description)
        for info in SECTION_CATALOG.values()
    ]
