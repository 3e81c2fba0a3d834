"""create-pika-app -- scaffold a Preact + Pika web app.

Quick usage::

    import asyncio
    from create_pika_app import Config, Pipeline

    state = asyncio.run(Pipeline(Config(), "/tmp/my-app").run())
"""

from create_pika_app.config import VERSION, Config, ProjectRequest
from create_pika_app.errors import CopyFailed, MissingProjectName, PipelineAborted, ScaffoldError
from create_pika_app.pipeline import STAGES, Pipeline

__version__ = VERSION

__all__ = [
    "Config",
    "CopyFailed",
    "MissingProjectName",
    "Pipeline",
    "PipelineAborted",
    "ProjectRequest",
    "STAGES",
    "ScaffoldError",
    "__version__",
]
