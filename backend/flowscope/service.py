"""
Analysis Service - the public entry point for every analysis operation.

Each call takes the raw diagram payload, builds its own model and engine and
returns an OperationResult. Only DiagramShapeError escapes: the payload could
not be read as a diagram at all. Any other failure inside an analyzer is
reported to the observer and comes back as a failed result.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional

from flowscope.analysis.complexity import ComplexityAnalyzer
from flowscope.analysis.parser import DiagramParser
from flowscope.analysis.policy import DEFAULT_POLICY, ScoringPolicy
from flowscope.analysis.process import ProcessAnalyzer
from flowscope.errors import AnalysisError, DiagramShapeError
from flowscope.graph.model import Diagram
from flowscope.observers import AnalysisObserver, NullObserver
from flowscope.recommendations.engine import RecommendationEngine
from flowscope.validation.diagram_validator import DiagramValidator


@dataclass
class OperationResult:
    success: bool
    data: Any = None
    error: Optional[str] = None


class AnalysisService:
    """
    Usage:
        service = AnalysisService()
        result = service.analyze_complexity(payload)
        if result.success:
            print(result.data.overall_score)
    """

    def __init__(
        self,
        policy: ScoringPolicy = DEFAULT_POLICY,
        observer: Optional[AnalysisObserver] = None,
    ):
        self.policy = policy
        self.observer = observer or NullObserver()

    def _run(self, operation: str, payload: Any, func: Callable[[Diagram], Any]) -> OperationResult:
        diagram = Diagram.from_dict(payload)
        try:
            return OperationResult(success=True, data=func(diagram))
        except DiagramShapeError:
            raise
        except Exception as e:
            error = AnalysisError(operation, str(e))
            self.observer.notify("analysis.failed", operation=operation, reason=str(e))
            return OperationResult(success=False, error=str(error))

    def validate(self, payload: Any) -> OperationResult:
        validator = DiagramValidator(self.policy, self.observer)
        return self._run("Validation", payload, validator.validate)

    def parse(
        self,
        payload: Any,
        include_metadata: bool = True,
        analyze_flow: bool = True,
        extract_patterns: bool = True,
    ) -> OperationResult:
        parser = DiagramParser(self.policy, self.observer)
        return self._run("Parsing", payload, lambda d: parser.parse(
            d,
            include_metadata=include_metadata,
            analyze_flow=analyze_flow,
            extract_patterns=extract_patterns,
        ))

    def extract_patterns(self, payload: Any) -> OperationResult:
        parser = DiagramParser(self.policy, self.observer)
        return self._run("Pattern extraction", payload, parser.extract_patterns)

    def analyze_flow(
        self,
        payload: Any,
        include_metrics: bool = True,
        analyze_paths: bool = True,
    ) -> OperationResult:
        analyzer = ProcessAnalyzer(self.policy, self.observer)
        return self._run("Flow analysis", payload, lambda d: analyzer.analyze_flow(
            d, include_metrics=include_metrics, analyze_paths=analyze_paths
        ))

    def analyze_complexity(self, payload: Any) -> OperationResult:
        analyzer = ComplexityAnalyzer(self.policy, self.observer)
        return self._run("Complexity analysis", payload, analyzer.analyze)

    def generate_recommendations(self, payload: Any, analysis_type: str = "all") -> OperationResult:
        engine = RecommendationEngine(self.policy, self.observer)
        return self._run(
            "Recommendation generation", payload, lambda d: engine.generate(d, analysis_type)
        )

    def analyze_dependencies(self, payload: Any) -> OperationResult:
        analyzer = ProcessAnalyzer(self.policy, self.observer)
        return self._run("Dependency analysis", payload, analyzer.analyze_dependencies)

    def analyze_performance(self, payload: Any, expected_data_load: str = "medium") -> OperationResult:
        analyzer = ProcessAnalyzer(self.policy, self.observer)
        return self._run("Performance analysis", payload, lambda d: analyzer.analyze_performance(
            d, expected_data_load=expected_data_load
        ))
