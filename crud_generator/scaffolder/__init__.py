"""crud-generator scaffolder -- writes the CRUD artifact set for a resource.

This package takes a resource name and a field list and produces the model,
migration, controller, Blade views and resource route inside a Laravel
project, patching files that already exist instead of duplicating their
content.

Quick usage::

    from crud_generator.config import CrudConfig
    from crud_generator.scaffolder import CrudGenerator

    config = CrudConfig.for_project("/srv/blog")
    report = await CrudGenerator(config).generate("Post", "title:string,body:text")
"""

from crud_generator.scaffolder.bridge import ArtisanBridge, BridgeError, StubBridge, select_bridge
from crud_generator.scaffolder.generator import CrudGenerator
from crud_generator.scaffolder.results import ArtifactKind, GenerationReport, StepResult, StepStatus
from crud_generator.scaffolder.templates import TemplateRenderer

__all__ = [
    "ArtifactKind",
    "ArtisanBridge",
    "BridgeError",
    "CrudGenerator",
    "GenerationReport",
    "StepResult",
    "StepStatus",
    "StubBridge",
    "TemplateRenderer",
    "select_bridge",
]
