"""Project creation pipeline stages.

Key classes:
    SchemaBuilder            - Inputs, options and answers -> CreationSchema
    AcquisitionEngine        - Clone or download + extract into project_dir
    IntegrationOrchestrator  - Ordered post-acquisition side effects
    IntegrationState         - Mutable flags (git, native integrations, link)
"""

from appstart.models import ClonedSchema, CreationSchema, GeneratedSchema, ResolvedStarterTemplate
from .options import StartOptions, normalize_options
from .schema_builder import SchemaBuilder, SchemaResult
from .acquisition import AcquisitionEngine
from .integration import IntegrationOrchestrator, IntegrationState
from .next_steps import next_steps, show_next_steps

__all__ = [
    # Schema
    "ClonedSchema",
    "CreationSchema",
    "GeneratedSchema",
    "ResolvedStarterTemplate",
    "SchemaBuilder",
    "SchemaResult",
    # Options
    "StartOptions",
    "normalize_options",
    # Stages
    "AcquisitionEngine",
    "IntegrationOrchestrator",
    "IntegrationState",
    "next_steps",
    "show_next_steps",
]
