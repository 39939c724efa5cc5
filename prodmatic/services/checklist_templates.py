"""
Launch checklist templates.

Each entry is (title, category, is_required).
"""

from __future__ import annotations

from prodmatic.models.release import ChecklistCategory as C

ChecklistTemplate = list[tuple[str, C, bool]]

BASIC: ChecklistTemplate = [
    ("Code review completed", C.preparation, True),
    ("Unit tests passing", C.testing, True),
    ("Integration tests passing", C.testing, True),
    ("Production deployment completed", C.deployment, True),
    ("Health checks passing", C.monitoring, True),
    ("Release notes published", C.communication, False),
    ("Team notified of release", C.communication, False),
    ("Rollback plan prepared", C.rollback, True),
]

COMPREHENSIVE: ChecklistTemplate = [
    ("Code review completed", C.preparation, True),
    ("Security review completed", C.preparation, True),
    ("Database migrations tested", C.preparation, True),
    ("Feature flags configured", C.preparation, False),
    ("Unit tests passing (95%+ coverage)", C.testing, True),
    ("Integration tests passing", C.testing, True),
    ("End-to-end tests passing", C.testing, True),
    ("Performance tests completed", C.testing, False),
    ("Staging deployment successful", C.deployment, True),
    ("Production deployment completed", C.deployment, True),
    ("Load balancer configuration updated", C.deployment, False),
    ("Application health checks passing", C.monitoring, True),
    ("Error monitoring configured", C.monitoring, True),
    ("Performance monitoring active", C.monitoring, False),
    ("Release notes published", C.communication, True),
    ("Customer support team briefed", C.communication, True),
    ("Marketing team notified", C.communication, False),
    ("Rollback procedure documented", C.rollback, True),
    ("Database rollback tested", C.rollback, True),
]

ENTERPRISE: ChecklistTemplate = [
    ("Code review completed by lead developer", C.preparation, True),
    ("Security review by security team", C.preparation, True),
    ("Architecture review completed", C.preparation, True),
    ("Database migrations tested in staging", C.preparation, True),
    ("Feature flags and toggles configured", C.preparation, True),
    ("Dependency security scan completed", C.preparation, True),
    ("Unit tests passing (98%+ coverage)", C.testing, True),
    ("Integration tests passing", C.testing, True),
    ("End-to-end tests passing", C.testing, True),
    ("Performance tests meet SLA requirements", C.testing, True),
    ("Security penetration testing completed", C.testing, True),
    ("Accessibility testing completed", C.testing, True),
    ("Staging deployment successful", C.deployment, True),
    ("Blue-green deployment strategy executed", C.deployment, True),
    ("Production deployment completed", C.deployment, True),
    ("CDN cache invalidation completed", C.deployment, False),
    ("Application health checks passing", C.monitoring, True),
    ("Error monitoring and alerting active", C.monitoring, True),
    ("Performance monitoring and dashboards active", C.monitoring, True),
    ("Security monitoring configured", C.monitoring, True),
    ("Business metrics tracking active", C.monitoring, False),
    ("Release notes published", C.communication, True),
    ("Customer support team trained and briefed", C.communication, True),
    ("Sales team notified of new features", C.communication, True),
    ("Marketing team provided with launch materials", C.communication, True),
    ("Executive stakeholders informed", C.communication, True),
    ("Customer communication plan executed", C.communication, False),
    ("Comprehensive rollback procedure documented", C.rollback, True),
    ("Database rollback tested and verified", C.rollback, True),
    ("Infrastructure rollback plan prepared", C.rollback, True),
    ("Emergency contact list updated", C.rollback, True),
]

TEMPLATES: dict[str, ChecklistTemplate] = {
    "basic": BASIC,
    "comprehensive": COMPREHENSIVE,
    "enterprise": ENTERPRISE,
}
