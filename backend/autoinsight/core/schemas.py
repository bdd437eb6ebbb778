from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Any, Dict, Literal, Tuple

ColumnType = Literal['numeric', 'categorical', 'datetime', 'boolean', 'text']
CorrelationStrength = Literal['weak', 'moderate', 'strong']
ChartType = Literal['bar', 'line', 'pie', 'scatter', 'histogram', 'heatmap', 'box', 'area', 'treemap']
InsightType = Literal['trend', 'anomaly', 'correlation', 'distribution', 'quality', 'business']
Severity = Literal['low', 'medium', 'high']


class ColumnStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    min: float
    max: float
    mean: float
    median: float
    std: float
    q1: float
    q3: float


class DataColumn(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type: ColumnType
    unique_values: int
    null_count: int
    sample_values: Tuple[Any, ...]  # first 10 non-null values, in row order
    stats: Optional[ColumnStats] = None  # numeric columns with at least one number
    distribution: Optional[Dict[str, int]] = None  # categorical columns with <= 20 uniques


class DataQuality(BaseModel):
    model_config = ConfigDict(frozen=True)

    completeness: float = Field(ge=0, le=1)
    duplicate_rows: int
    outliers: int


class Correlation(BaseModel):
    model_config = ConfigDict(frozen=True)

    col1: str
    col2: str
    correlation: float
    strength: CorrelationStrength


class DataProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_rows: int
    total_columns: int
    columns: Tuple[DataColumn, ...]
    data_quality: DataQuality
    correlations: Tuple[Correlation, ...]

    def column(self, name: str) -> Optional[DataColumn]:
        return next((c for c in self.columns if c.name == name), None)

    def columns_of_type(self, column_type: str) -> List[DataColumn]:
        return [c for c in self.columns if c.type == column_type]


class ChartRecommendation(BaseModel):
    id: str  # "<kind>-<column>[-<column>]"
    title: str
    type: ChartType
    data: List[Dict[str, Any]]  # rendering-agnostic aggregate rows
    insights: List[str]
    priority: int
    columns: List[str]
    description: str


class AIInsight(BaseModel):
    type: InsightType
    title: str
    description: str
    severity: Severity
    actionable: bool
    recommendation: Optional[str] = None
    data: Optional[Dict[str, Any]] = None


class DatasetSummary(BaseModel):
    total_rows: int
    total_columns: int
    column_types: Dict[str, int]
    strong_correlations: int
    completeness: float
    business_insights: int
    technical_insights: int
    actionable_insights: int


class AnalysisResult(BaseModel):
    profile: DataProfile
    charts: List[ChartRecommendation]
    insights: List[AIInsight]
    summary: DatasetSummary


class AnalyzeRequest(BaseModel):
    rows: List[Dict[str, Any]]


class AnalysisResponse(AnalysisResult):
    dataset_id: str


class RefreshResponse(BaseModel):
    dataset_id: str
    charts: List[ChartRecommendation]
    insights: List[AIInsight]
