"""
Service Dependencies.

Annotated FastAPI dependencies resolving engine components from the
process-wide ``ServiceContainer``.
"""

from typing import Annotated

from fastapi import Depends

from toolmesh_ai.server.services.container import ServiceContainer, get_container

ContainerDep = Annotated[ServiceContainer, Depends(get_container)]
