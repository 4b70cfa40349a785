"""Default service agreement and placeholder filling for generated contracts"""

import re
from typing import Mapping

_PLACEHOLDER = re.compile(r"\{\{\s*(\w+)\s*\}\}")

DEFAULT_AGREEMENT = """<h1>Marketing Services Agreement</h1>
<p>This Marketing Services Agreement is entered into on {{effective_date}} between
<strong>{{company_name}}</strong> ({{company_email}}) ("Agency") and
<strong>{{client_name}}</strong> {{client_company}} ({{client_email}}) ("Client").</p>

<h2>1. Services</h2>
<p>The Agency will provide the following services:</p>
{{deliverables}}

<h2>2. Term</h2>
<p>This agreement runs for {{contract_term}} from the effective date.</p>

<h2>3. Fees</h2>
<p>Monthly retainer: {{monthly_amount}}. One-time setup: {{setup_fee}}.
Total contract value: {{total_value}}.</p>
<p>Payment schedule: {{milestones}}.</p>

<h2>4. Governing Law</h2>
<p>This agreement is governed by the laws of the State of {{governing_state}}.</p>

<h2>5. Signatures</h2>
<p>Agency: {{provider_name}}</p>
<p>Client: {{client_signer_name}}</p>
"""


def fill_placeholders(content: str, values: Mapping[str, str]) -> str:
    """Replace ``{{key}}`` markers with values; unknown keys are left in place"""

    def replace(match: re.Match) -> str:
        key = match.group(1)
        if key not in values:
            return match.group(0)
        return values[key] or ""

    return _PLACEHOLDER.sub(replace, content)
