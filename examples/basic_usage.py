"""Example: audit one live site with an OpenAI model.

Needs ``OPENAI_API_KEY`` in the environment.
"""

import sys

from langchain_openai import ChatOpenAI

from http_coach import AdvisoryGenerator, HeaderAuditor

url = sys.argv[1] if len(sys.argv) > 1 else "https://example.com"

auditor = HeaderAuditor()
report = auditor.audit(url)
auditor.close()

print(f"Score  : {report.score}/100")
for name, value in report.headers_found.items():
    print(f"  + {name}: {value}")
for name in report.missing:
    print(f"  - {name}")

advisor = AdvisoryGenerator(ChatOpenAI(model="gpt-4o-mini"))
advice = advisor.advise(url, report.headers_found, report.missing)
print(advice)
