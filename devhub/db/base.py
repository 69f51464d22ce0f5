from sqlmodel import SQLModel

# Import all models here to ensure they are registered with SQLModel
from devhub.models.compound import ChemicalCompound, CompoundProperty, RecentCompound  # noqa
from devhub.models.deployment import AppStatus, Deployment, DeploymentError  # noqa

__all__ = ["SQLModel"]
