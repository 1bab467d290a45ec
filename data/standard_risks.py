"""
Standard risk catalogue.
Every product is expected to be assessed against these; anything recorded
under another category counts as a custom risk.
"""

STANDARD_RISKS = [
    {
        "name": "Administrator unintentionally introduces significant bug into production software",
        "category": "Error",
        "description": "Production bug introduced by administrative error",
        "loss_event_category": "Execution, Delivery & Process Management",
    },
    {
        "name": "Vulnerable component gets deployed to production environment",
        "category": "Error",
        "description": "Security vulnerability introduced in production",
        "loss_event_category": "Execution, Delivery & Process Management",
    },
    {
        "name": "Unauthorized internal access to confidential information",
        "category": "Error",
        "description": "Internal unauthorized access to sensitive data",
        "loss_event_category": "Internal Fraud",
    },
    {
        "name": "Unauthorized external or partner access to confidential information",
        "category": "Error",
        "description": "External unauthorized access to sensitive data",
        "loss_event_category": "External Fraud",
    },
    {
        "name": "Third party dependency disrupts core component",
        "category": "Failure",
        "description": "Critical dependency failure affecting core functionality",
        "loss_event_category": "Business Disruption and System Failures",
    },
    {
        "name": "Unable to provide data to other internal products",
        "category": "Failure",
        "description": "Data provision failure to internal systems",
        "loss_event_category": "Business Disruption and System Failures",
    },
    {
        "name": "Unable to get data from other internal products",
        "category": "Failure",
        "description": "Data retrieval failure from internal systems",
        "loss_event_category": "Business Disruption and System Failures",
    },
    {
        "name": "Insufficient Monitoring and Alerting",
        "category": "Failure",
        "description": "Inadequate system monitoring and alert mechanisms",
        "loss_event_category": "Business Disruption and System Failures",
    },
    {
        "name": "Resource exhaustion (CPU, memory, storage)",
        "category": "Failure",
        "description": "System resource depletion",
        "loss_event_category": "Business Disruption and System Failures",
    },
    {
        "name": "Malfunction causes violation of compliance frameworks like GDPR, NIS2, PCI-DSS",
        "category": "Failure",
        "description": "Compliance violation due to system malfunction",
        "loss_event_category": "Clients, Products & Business Practices",
    },
    {
        "name": "An attacker exposes PI data",
        "category": "Malicious",
        "description": "Malicious exposure of personal information",
        "loss_event_category": "External Fraud",
    },
    {
        "name": "Data is intentionally compromised by insider",
        "category": "Malicious",
        "description": "Intentional internal data compromise",
        "loss_event_category": "Internal Fraud",
    },
]

STANDARD_CATEGORIES = ("Error", "Failure", "Malicious")


def get_standard_risks(category=None):
    if category is None:
        return list(STANDARD_RISKS)
    return [r for r in STANDARD_RISKS if r["category"].lower() == category.lower()]
