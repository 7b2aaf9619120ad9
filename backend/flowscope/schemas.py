from pydantic import BaseModel, Field
from typing import Any, Literal, Optional


AnalysisType = Literal[
    "all", "performance", "structure", "usability", "security", "maintainability", "scalability"
]
DataLoad = Literal["low", "medium", "high", "very_high"]


class DiagramRequest(BaseModel):
    """Any request carrying a diagram; the payload shape is checked by the analyzers."""
    visualization: Optional[Any] = None


class ParseOptions(BaseModel):
    includeMetadata: bool = True
    analyzeFlow: bool = True
    extractPatterns: bool = True


class ParseRequest(DiagramRequest):
    options: ParseOptions = Field(default_factory=ParseOptions)


class FlowOptions(BaseModel):
    includeMetrics: bool = True
    analyzePaths: bool = True


class ProcessFlowRequest(DiagramRequest):
    options: FlowOptions = Field(default_factory=FlowOptions)


class RecommendationRequest(DiagramRequest):
    analysisType: AnalysisType = "all"


class PerformanceMetrics(BaseModel):
    expectedDataLoad: DataLoad = "medium"


class PerformanceRequest(DiagramRequest):
    metrics: PerformanceMetrics = Field(default_factory=PerformanceMetrics)
