"""
Recommendation Catalog - Pre-built improvement rules

Each rule pairs a recommendation template with the diagram facts that
trigger it. Rules are independent of each other.
"""

from flowscope.recommendations.registry import (
    Implementation,
    Recommendation,
    RecommendationCategory,
    RecommendationRegistry,
    RecommendationRule,
)


# ============================================================
# PERFORMANCE RULES
# ============================================================

DATABASE_OPTIMIZATION_RULE = RecommendationRule(
    id="optimize_database_operations",
    recommendation=Recommendation(
        category=RecommendationCategory.PERFORMANCE,
        priority="high",
        title="Optimize Database Operations",
        description="Multiple database operations detected. Consider connection pooling, caching, and query optimization.",
        impact="high",
        effort="medium",
        implementation=Implementation(
            steps=[
                "Implement database connection pooling",
                "Add caching layer (Redis/Memcached)",
                "Optimize database queries",
                "Consider read replicas for read-heavy operations",
            ],
            estimated_time="1-2 weeks",
            technologies=["Redis", "Connection pooling", "Query optimization"],
        ),
        metrics={
            "expectedImprovement": "30-50% reduction in response time",
            "measurableBy": ["Response time", "Database connection usage", "Cache hit ratio"],
        },
    ),
    condition=lambda f: f.count("database") > 3,
)


API_CACHING_RULE = RecommendationRule(
    id="api_caching_and_batching",
    recommendation=Recommendation(
        category=RecommendationCategory.PERFORMANCE,
        priority="medium",
        title="Implement API Caching and Batching",
        description="Multiple API calls can cause performance issues. Consider caching and request batching.",
        impact="medium",
        effort="low",
        implementation=Implementation(
            steps=[
                "Implement response caching",
                "Batch multiple API calls where possible",
                "Add request deduplication",
                "Implement circuit breaker pattern",
            ],
            estimated_time="3-5 days",
            technologies=["HTTP caching", "Request batching", "Circuit breaker"],
        ),
        metrics={
            "expectedImprovement": "20-40% reduction in API call time",
            "measurableBy": ["API response time", "Number of API calls", "Cache hit ratio"],
        },
    ),
    condition=lambda f: f.count("api-call") > 2,
)


PARALLEL_PROCESSING_RULE = RecommendationRule(
    id="parallel_processing",
    recommendation=Recommendation(
        category=RecommendationCategory.PERFORMANCE,
        priority="medium",
        title="Implement Parallel Processing",
        description="Identified opportunities for parallel execution to improve performance.",
        impact="high",
        effort="medium",
        implementation=Implementation(
            steps=[
                "Identify independent operations",
                "Implement async/await patterns",
                "Use worker threads for CPU-intensive tasks",
                "Implement proper synchronization",
            ],
            estimated_time="1 week",
            technologies=["Worker threads", "Async/await", "Task groups"],
        ),
    ),
    condition=lambda f: bool(f.parallel_opportunities),
    details=lambda f: {"opportunities": f.parallel_opportunities},
)


# ============================================================
# STRUCTURE RULES
# ============================================================

COMPLEX_COMPONENTS_RULE = RecommendationRule(
    id="break_down_complex_components",
    recommendation=Recommendation(
        category=RecommendationCategory.STRUCTURE,
        priority="high",
        title="Break Down Complex Components",
        description="Some components are overly complex and should be broken down into smaller parts.",
        impact="high",
        effort="high",
        implementation=Implementation(
            steps=[
                "Identify single responsibility for each component",
                "Extract sub-processes into separate modules",
                "Create clear interfaces between components",
                "Update documentation and tests",
            ],
            estimated_time="2-3 weeks",
            technologies=["Modular architecture", "Interface design"],
        ),
    ),
    condition=lambda f: bool(f.complex_components),
    details=lambda f: {"complexComponents": f.complex_components},
)


ERROR_HANDLING_RULE = RecommendationRule(
    id="add_error_handling_paths",
    recommendation=Recommendation(
        category=RecommendationCategory.STRUCTURE,
        priority="high",
        title="Add Error Handling Paths",
        description="The process lacks proper error handling. Add error paths and fallback mechanisms.",
        impact="high",
        effort="medium",
        implementation=Implementation(
            steps=[
                "Identify potential failure points",
                "Add try-catch blocks around critical operations",
                "Implement fallback mechanisms",
                "Add error logging and monitoring",
                "Create error recovery procedures",
            ],
            estimated_time="1 week",
            technologies=["Error handling", "Logging", "Monitoring"],
        ),
    ),
    condition=lambda f: not f.has_error_handling,
)


CIRCULAR_DEPENDENCIES_RULE = RecommendationRule(
    id="resolve_circular_dependencies",
    recommendation=Recommendation(
        category=RecommendationCategory.STRUCTURE,
        priority="high",
        title="Resolve Circular Dependencies",
        description="Circular dependencies can cause infinite loops and make the system unstable.",
        impact="high",
        effort="medium",
        implementation=Implementation(
            steps=[
                "Analyze dependency cycles",
                "Introduce dependency injection",
                "Extract shared dependencies to separate modules",
                "Refactor to eliminate cycles",
            ],
            estimated_time="1-2 weeks",
            technologies=["Dependency injection", "Modular design"],
        ),
    ),
    condition=lambda f: bool(f.circular_dependencies),
    details=lambda f: {"circularDependencies": f.circular_dependencies},
)


# ============================================================
# USABILITY RULES
# ============================================================

USER_FEEDBACK_RULE = RecommendationRule(
    id="user_feedback",
    recommendation=Recommendation(
        category=RecommendationCategory.USABILITY,
        priority="medium",
        title="Add User Feedback Mechanisms",
        description="Users should receive feedback on their actions. Add confirmation messages and progress indicators.",
        impact="medium",
        effort="low",
        implementation=Implementation(
            steps=[
                "Add success/error messages",
                "Implement loading indicators",
                "Add confirmation dialogs for critical actions",
                "Include progress bars for long operations",
            ],
            estimated_time="2-3 days",
            technologies=["UI components", "Notifications", "Progress indicators"],
        ),
    ),
    condition=lambda f: f.user_nodes > 0 and not f.has_feedback,
)


ACCESSIBILITY_RULE = RecommendationRule(
    id="accessibility",
    recommendation=Recommendation(
        category=RecommendationCategory.USABILITY,
        priority="medium",
        title="Implement Accessibility Features",
        description="Ensure the process is accessible to users with disabilities.",
        impact="medium",
        effort="medium",
        implementation=Implementation(
            steps=[
                "Add ARIA labels and roles",
                "Ensure keyboard navigation",
                "Implement screen reader support",
                "Add high contrast mode support",
                "Test with accessibility tools",
            ],
            estimated_time="1 week",
            technologies=["ARIA", "Accessibility testing", "WAI guidelines"],
        ),
    ),
    condition=lambda f: f.user_nodes > 0,
)


MOBILE_RESPONSIVENESS_RULE = RecommendationRule(
    id="mobile_responsiveness",
    recommendation=Recommendation(
        category=RecommendationCategory.USABILITY,
        priority="medium",
        title="Ensure Mobile Responsiveness",
        description="Make sure the process works well on mobile devices.",
        impact="medium",
        effort="medium",
        implementation=Implementation(
            steps=[
                "Implement responsive design",
                "Test on various screen sizes",
                "Optimize touch interactions",
                "Consider mobile-first approach",
            ],
            estimated_time="1 week",
            technologies=["Responsive design", "CSS media queries", "Touch optimization"],
        ),
    ),
    condition=lambda f: f.count("html-element") > 0,
)


# ============================================================
# SECURITY RULES
# ============================================================

AUTHENTICATION_RULE = RecommendationRule(
    id="user_authentication",
    recommendation=Recommendation(
        category=RecommendationCategory.SECURITY,
        priority="high",
        title="Implement User Authentication",
        description="Processes involving user input should include proper authentication mechanisms.",
        impact="high",
        effort="medium",
        implementation=Implementation(
            steps=[
                "Choose authentication strategy (JWT, OAuth, etc.)",
                "Implement login/logout functionality",
                "Add session management",
                "Implement authorization checks",
                "Add password security measures",
            ],
            estimated_time="1-2 weeks",
            technologies=["JWT", "OAuth 2.0", "Session management", "Password hashing"],
        ),
    ),
    condition=lambda f: f.user_nodes > 0 and not f.has_auth_service,
)


INPUT_VALIDATION_RULE = RecommendationRule(
    id="input_validation",
    recommendation=Recommendation(
        category=RecommendationCategory.SECURITY,
        priority="high",
        title="Implement Input Validation",
        description="All user inputs must be validated to prevent injection attacks.",
        impact="high",
        effort="low",
        implementation=Implementation(
            steps=[
                "Add client-side validation",
                "Implement server-side validation",
                "Sanitize all inputs",
                "Use parameterized queries for database operations",
                "Implement CSRF protection",
            ],
            estimated_time="3-5 days",
            technologies=["Input validation", "Sanitization", "CSRF tokens", "Parameterized queries"],
        ),
    ),
    condition=lambda f: f.form_inputs > 0,
)


SECURE_COMMUNICATION_RULE = RecommendationRule(
    id="secure_communication",
    recommendation=Recommendation(
        category=RecommendationCategory.SECURITY,
        priority="high",
        title="Ensure Secure Communication",
        description="All API communications should use HTTPS and proper encryption.",
        impact="high",
        effort="low",
        implementation=Implementation(
            steps=[
                "Use HTTPS for all API calls",
                "Implement proper SSL/TLS configuration",
                "Add API key management",
                "Implement request signing",
                "Use secure headers",
            ],
            estimated_time="2-3 days",
            technologies=["HTTPS", "SSL/TLS", "API security", "Secure headers"],
        ),
    ),
    condition=lambda f: f.count("api-call") > 0,
)


# ============================================================
# MAINTAINABILITY RULES
# ============================================================

DOCUMENTATION_RULE = RecommendationRule(
    id="improve_documentation",
    recommendation=Recommendation(
        category=RecommendationCategory.MAINTAINABILITY,
        priority="medium",
        title="Improve Documentation",
        description="Many components lack proper documentation. Add detailed descriptions and comments.",
        impact="medium",
        effort="low",
        implementation=Implementation(
            steps=[
                "Add descriptions to all components",
                "Document data flows and dependencies",
                "Create API documentation",
                "Add inline comments for complex logic",
                "Create user guides and technical documentation",
            ],
            estimated_time="1 week",
            technologies=["Documentation tools", "API docs", "Comments"],
        ),
    ),
    condition=lambda f: f.poorly_documented > f.node_count * 0.3,
)


TESTING_RULE = RecommendationRule(
    id="comprehensive_testing",
    recommendation=Recommendation(
        category=RecommendationCategory.MAINTAINABILITY,
        priority="high",
        title="Implement Comprehensive Testing",
        description="Add unit tests, integration tests, and end-to-end tests to ensure reliability.",
        impact="high",
        effort="high",
        implementation=Implementation(
            steps=[
                "Create unit tests for individual components",
                "Add integration tests for component interactions",
                "Implement end-to-end tests for complete workflows",
                "Set up continuous integration",
                "Add code coverage monitoring",
            ],
            estimated_time="2-3 weeks",
            technologies=["pytest", "Playwright", "CI/CD", "Code coverage tools"],
        ),
    ),
    condition=lambda f: True,
)


MONITORING_RULE = RecommendationRule(
    id="monitoring_and_logging",
    recommendation=Recommendation(
        category=RecommendationCategory.MAINTAINABILITY,
        priority="medium",
        title="Add Monitoring and Logging",
        description="Implement comprehensive monitoring and logging for better observability.",
        impact="medium",
        effort="medium",
        implementation=Implementation(
            steps=[
                "Add application logging",
                "Implement error tracking",
                "Set up performance monitoring",
                "Create dashboards and alerts",
                "Add health checks",
            ],
            estimated_time="1 week",
            technologies=["Logging frameworks", "Error tracking", "Monitoring tools", "Dashboards"],
        ),
    ),
    condition=lambda f: True,
)


# ============================================================
# SCALABILITY RULES
# ============================================================

DATABASE_SCALABILITY_RULE = RecommendationRule(
    id="database_scalability",
    recommendation=Recommendation(
        category=RecommendationCategory.SCALABILITY,
        priority="medium",
        title="Implement Database Scalability",
        description="Prepare database layer for increased load and data volume.",
        impact="high",
        effort="high",
        implementation=Implementation(
            steps=[
                "Implement database sharding",
                "Add read replicas",
                "Optimize database indexes",
                "Consider NoSQL for specific use cases",
                "Implement database connection pooling",
            ],
            estimated_time="2-4 weeks",
            technologies=["Database sharding", "Read replicas", "Connection pooling", "NoSQL"],
        ),
    ),
    condition=lambda f: f.count("database") > 0,
)


HORIZONTAL_SCALING_RULE = RecommendationRule(
    id="horizontal_scaling",
    recommendation=Recommendation(
        category=RecommendationCategory.SCALABILITY,
        priority="medium",
        title="Implement Horizontal Scaling",
        description="Prepare the system for horizontal scaling with load balancing and microservices.",
        impact="high",
        effort="high",
        implementation=Implementation(
            steps=[
                "Containerize applications",
                "Implement load balancing",
                "Add auto-scaling capabilities",
                "Implement stateless design",
                "Add service discovery",
            ],
            estimated_time="3-6 weeks",
            technologies=["Docker", "Kubernetes", "Load balancers", "Microservices"],
        ),
    ),
    condition=lambda f: f.scaling_nodes > 3,
)


CACHING_STRATEGY_RULE = RecommendationRule(
    id="caching_strategy",
    recommendation=Recommendation(
        category=RecommendationCategory.SCALABILITY,
        priority="medium",
        title="Implement Caching Strategy",
        description="Add caching at multiple levels to improve performance and reduce load.",
        impact="medium",
        effort="medium",
        implementation=Implementation(
            steps=[
                "Implement application-level caching",
                "Add database query caching",
                "Implement CDN for static assets",
                "Add browser caching headers",
                "Consider distributed caching",
            ],
            estimated_time="1-2 weeks",
            technologies=["Redis", "Memcached", "CDN", "Browser caching"],
        ),
    ),
    condition=lambda f: True,
)


# ============================================================
# CATALOG AGGREGATION
# ============================================================

RULE_CATALOG = [
    # Performance
    DATABASE_OPTIMIZATION_RULE,
    API_CACHING_RULE,
    PARALLEL_PROCESSING_RULE,
    # Structure
    COMPLEX_COMPONENTS_RULE,
    ERROR_HANDLING_RULE,
    CIRCULAR_DEPENDENCIES_RULE,
    # Usability
    USER_FEEDBACK_RULE,
    ACCESSIBILITY_RULE,
    MOBILE_RESPONSIVENESS_RULE,
    # Security
    AUTHENTICATION_RULE,
    INPUT_VALIDATION_RULE,
    SECURE_COMMUNICATION_RULE,
    # Maintainability
    DOCUMENTATION_RULE,
    TESTING_RULE,
    MONITORING_RULE,
    # Scalability
    DATABASE_SCALABILITY_RULE,
    HORIZONTAL_SCALING_RULE,
    CACHING_STRATEGY_RULE,
]


def register_all_rules(registry: RecommendationRegistry) -> None:
    """Register all rules from the catalog"""
    for rule in RULE_CATALOG:
        registry.register(rule)
