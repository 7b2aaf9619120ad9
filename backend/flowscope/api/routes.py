import logging
from typing import Any, Callable, Dict

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from flowscope import __version__
from flowscope.api.observers import LoggingObserver
from flowscope.api.serializers import serialize_result
from flowscope.config import runtime_policy
from flowscope.errors import DiagramShapeError
from flowscope.schemas import (
    DiagramRequest,
    ParseRequest,
    PerformanceRequest,
    ProcessFlowRequest,
    RecommendationRequest,
)
from flowscope.service import AnalysisService, OperationResult

logger = logging.getLogger(__name__)

router = APIRouter()

service = AnalysisService(policy=runtime_policy(), observer=LoggingObserver())

SERVICE_NAME = "flowscope - process diagram analysis"


def bad_request(message: str) -> JSONResponse:
    return JSONResponse({"error": "Bad Request", "message": message}, status_code=400)


def respond(
    title: str,
    request: DiagramRequest,
    call: Callable[[Any], OperationResult],
    body: Callable[[Any], Dict[str, Any]],
):
    """
    Run one service operation and map its outcome onto HTTP.

    400 when the payload is not a diagram, 500 when the operation failed,
    otherwise 200 with `success: true` and the operation's body.
    """
    if request.visualization is None:
        return bad_request("Visualization data is required")

    try:
        result = call(request.visualization)
    except DiagramShapeError as e:
        return bad_request(str(e))
    except Exception as e:
        logger.exception("%s failed outside the analysis boundary", title)
        return JSONResponse({"error": f"{title} Error", "message": str(e)}, status_code=500)

    if not result.success:
        logger.error("%s failed: %s", title, result.error)
        return JSONResponse({"error": f"{title} Error", "message": result.error}, status_code=500)

    return {"success": True, **body(serialize_result(result.data))}


# ============================================================
# SERVICE INFO
# ============================================================

@router.get("/health")
def health():
    return {"status": "healthy", "service": SERVICE_NAME, "version": __version__}


@router.get("/api")
def api_overview():
    """Describe the available endpoints"""
    return {
        "name": SERVICE_NAME,
        "version": __version__,
        "policyVersion": service.policy.version,
        "endpoints": {
            "GET /health": "Service health check",
            "GET /api": "This documentation",
            "POST /api/diagrams/parse": "Parse diagram data into readable format",
            "POST /api/diagrams/validate": "Validate diagram structure",
            "POST /api/diagrams/extract-patterns": "Detect recurring flow patterns",
            "POST /api/analysis/process-flow": "Analyze process flow logic",
            "POST /api/analysis/complexity": "Analyze diagram complexity",
            "POST /api/analysis/recommendations": "Get improvement recommendations",
            "POST /api/analysis/dependencies": "Analyze component dependencies",
            "POST /api/analysis/performance": "Estimate performance bottlenecks",
        },
    }


# ============================================================
# DIAGRAM ENDPOINTS
# ============================================================

@router.post("/api/diagrams/parse")
def parse_diagram(request: ParseRequest):
    options = request.options
    return respond(
        "Parse",
        request,
        lambda payload: service.parse(
            payload,
            include_metadata=options.includeMetadata,
            analyze_flow=options.analyzeFlow,
            extract_patterns=options.extractPatterns,
        ),
        lambda data: {
            "data": data,
            "meta": {
                "nodeCount": len(data["nodes"]),
                "edgeCount": len(data["edges"]),
                "processSteps": len(data["processSteps"]),
                "complexity": data["complexity"],
            },
        },
    )


@router.post("/api/diagrams/validate")
def validate_diagram(request: DiagramRequest):
    return respond(
        "Validation",
        request,
        service.validate,
        lambda data: {"valid": data["isValid"], "validation": data},
    )


@router.post("/api/diagrams/extract-patterns")
def extract_patterns(request: DiagramRequest):
    return respond(
        "Pattern Extraction",
        request,
        service.extract_patterns,
        lambda data: {"patterns": data, "patternCount": len(data)},
    )


# ============================================================
# ANALYSIS ENDPOINTS
# ============================================================

@router.post("/api/analysis/process-flow")
def analyze_process_flow(request: ProcessFlowRequest):
    options = request.options
    return respond(
        "Analysis",
        request,
        lambda payload: service.analyze_flow(
            payload,
            include_metrics=options.includeMetrics,
            analyze_paths=options.analyzePaths,
        ),
        lambda data: {
            "analysis": data,
            "insights": {
                "totalPaths": len(data["paths"]),
                "criticalPath": data["criticalPath"],
                "bottlenecks": data["bottlenecks"],
                "parallelProcesses": data["parallelProcesses"],
            },
        },
    )


@router.post("/api/analysis/complexity")
def analyze_complexity(request: DiagramRequest):
    return respond(
        "Complexity Analysis",
        request,
        service.analyze_complexity,
        lambda data: {
            "complexity": data,
            "metrics": {
                "score": data["overallScore"],
                "level": data["level"],
                "factors": data["factors"],
            },
        },
    )


@router.post("/api/analysis/recommendations")
def get_recommendations(request: RecommendationRequest):
    def summary(data):
        categories = []
        for rec in data:
            if rec["category"] not in categories:
                categories.append(rec["category"])
        return {
            "recommendations": data,
            "summary": {
                "totalRecommendations": len(data),
                "highPriority": sum(1 for rec in data if rec["priority"] == "high"),
                "categories": categories,
            },
        }

    return respond(
        "Recommendation",
        request,
        lambda payload: service.generate_recommendations(payload, request.analysisType),
        summary,
    )


@router.post("/api/analysis/dependencies")
def analyze_dependencies(request: DiagramRequest):
    return respond(
        "Dependency Analysis",
        request,
        service.analyze_dependencies,
        lambda data: {"dependencies": data, "insights": data["insights"]},
    )


@router.post("/api/analysis/performance")
def analyze_performance(request: PerformanceRequest):
    return respond(
        "Performance Analysis",
        request,
        lambda payload: service.analyze_performance(
            payload, expected_data_load=request.metrics.expectedDataLoad
        ),
        lambda data: {
            "performance": data,
            "bottlenecks": data["bottlenecks"],
            "optimizations": data["suggestedOptimizations"],
        },
    )
