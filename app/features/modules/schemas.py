"""
Pydantic schemas for module manifests.
"""
from typing import List, Optional
from pydantic import BaseModel, Field


class ProvidedPermission(BaseModel):
    """Permission declared by a module. A missing name is reported by the catalog."""
    name: Optional[str] = Field(None, description="Hierarchical permission name, e.g. 'monitoring/command/*'")
    description: str = Field("", description="Permission description")


class ProvidedRestriction(BaseModel):
    """Restriction declared by a module."""
    name: Optional[str] = Field(None, description="Restriction name, e.g. 'monitoring/filter/objects'")
    description: str = Field("", description="Restriction description")


class ModuleSpec(BaseModel):
    """One installed module and what it provides."""
    name: str = Field(..., min_length=1, description="Module name")
    permissions: List[ProvidedPermission] = []
    restrictions: List[ProvidedRestriction] = []


class ModuleManifest(BaseModel):
    """Top level of the JSON manifest file."""
    modules: List[ModuleSpec] = []
