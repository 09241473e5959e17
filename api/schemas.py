from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from insightforge.dataset import Dataset


class DatasetModel(BaseModel):
    id: Union[str, int]
    columns: List[str] = Field(default_factory=list)
    rows: List[List[Any]] = Field(default_factory=list)

    def to_dataset(self) -> Dataset:
        return Dataset(id=str(self.id), columns=list(self.columns), rows=[list(r) for r in self.rows])


class MethodInfoModel(BaseModel):
    group: str
    method: str
    label: str
    archetype: str
    paired: bool = False
    requirements: Dict[str, bool] = Field(default_factory=dict)


class MethodsResponse(BaseModel):
    groups: List[str]
    methods: List[MethodInfoModel]


class AnalysisResponse(BaseModel):
    group: str
    method: str
    archetype: str
    chart: Dict[str, Any]
    spec: Optional[Dict[str, Any]] = None
