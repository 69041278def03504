"""Static help text."""

from crm_engine.handlers.base import ActionHandler
from crm_engine.models.entities import EntityPayload
from crm_engine.models.intent import ActionTag, ExecutionResult

HELP_TEXT = """CRM Assistant Commands

Create:
  - "Create company [name]" - add a new client
  - "Add contact [name] to [company]" - add a new contact
  - "Create deal [title] worth $[amount]" - add a new deal
  - "Create project [name]" - add a new project
  - "Log [X] hours on [description]" - track time

Search:
  - "Show all companies" - list companies
  - "Find contacts" - list contacts
  - "Show deals above $[amount]" - filter deals
  - "List active projects" - show projects

Change:
  - "Move the [deal] deal to negotiation" - update a deal
  - "Convert the [deal] deal into a project" - start delivery
  - "Delete the [company] company" - remove a record

Examples:
  - "Create client TechCorp with $50k software deal"
  - "Add John Smith to TechCorp, email john@tech.com"
  - "Show me all deals above $10000"
  - "Log 3 hours working on website design"

Just ask in natural language."""


class HelpHandler(ActionHandler):
    """Returns the command overview; never touches the store."""

    action = ActionTag.HELP

    async def execute(self, entities: EntityPayload) -> ExecutionResult:
        return ExecutionResult.ok(data=HELP_TEXT, message=HELP_TEXT)
