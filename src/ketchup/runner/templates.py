"""Message templates for the run report."""

REPORT_HEADER = """
# Ketchup Collection Report
"""

REPORT_SECTION_TOTALS = """
## Totals
- **Namespaces visited:** {total_namespaces}
- **Cluster-scoped resources:** {total_cluster_resources}
- **Namespaced resources:** {total_namespaced_resources}
- **Total resources:** {total_resources}
- **Sanitized:** {sanitized}
- **Optional resources included:** {optional}
"""

REPORT_SECTION_ERRORS = """
## Collection errors ({count})
{errors}
"""

REPORT_SECTION_DISCOVERY = """
## Discovery warnings
{warnings}
"""

REPORT_SECTION_OUTPUT = """
## Output
Files saved to `{path}`
"""

REPORT_CANCELLED = """
(Collection was interrupted: the output is partial.)
"""
