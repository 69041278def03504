"""Per-action validation of intent entities.

This module provides the IntentValidator, which checks the required fields
of each action and the ranges and choices of supplied values before any
record-store call is made.
"""

from typing import Callable, Dict, get_args

from crm_engine.models.entities import EntityPayload
from crm_engine.models.intent import ActionTag
from crm_engine.models.records import DealStage, ProjectStatus
from crm_engine.validators.field_validators import FieldValidators
from crm_engine.validators.validation_report import ValidationReport

DEAL_STAGES = get_args(DealStage)
PROJECT_STATUSES = get_args(ProjectStatus)


class IntentValidator:
    """Validator for the typed entity payload of an intent.

    Example:
        >>> validator = IntentValidator()
        >>> entities = parse_entities(ActionTag.CREATE_CONTACT, {"contactFirstName": "Ada"})
        >>> report = validator.validate(ActionTag.CREATE_CONTACT, entities)
        >>> report.error_message()
        'Contact first and last name are required'
    """

    def __init__(self) -> None:
        self._rules: Dict[ActionTag, Callable[[EntityPayload, ValidationReport], None]] = {
            ActionTag.CREATE_COMPANY: self._create_company,
            ActionTag.CREATE_CONTACT: self._create_contact,
            ActionTag.CREATE_DEAL: self._create_deal,
            ActionTag.CREATE_PROJECT: self._create_project,
            ActionTag.CREATE_TIME_ENTRY: self._create_time_entry,
            ActionTag.GET_DEALS: self._get_deals,
            ActionTag.UPDATE_COMPANY: self._company_target,
            ActionTag.UPDATE_CONTACT: self._contact_target,
            ActionTag.UPDATE_DEAL: self._update_deal,
            ActionTag.UPDATE_PROJECT: self._update_project,
            ActionTag.UPDATE_TIME_ENTRY: self._update_time_entry,
            ActionTag.DELETE_COMPANY: self._company_target,
            ActionTag.DELETE_CONTACT: self._contact_target,
            ActionTag.DELETE_DEAL: self._deal_target,
            ActionTag.DELETE_PROJECT: self._project_target,
            ActionTag.DELETE_TIME_ENTRY: self._time_entry_target,
        }

    def validate(self, action: ActionTag, entities: EntityPayload) -> ValidationReport:
        """Validate the entities of one intent.

        Actions without rules (help, unknown, most listings) always pass.

        Args:
            action: The intent's action tag
            entities: Parsed entity payload for that action

        Returns:
            ValidationReport with any issues found
        """
        report = ValidationReport()
        rule = self._rules.get(action)
        if rule is not None:
            rule(entities, report)
        return report

    # Create actions

    def _create_company(self, e, report: ValidationReport) -> None:
        FieldValidators.validate_required_text(
            e.company_name,
            "companyName",
            report,
            message="Company name is required",
            guidance="Please provide a company name to create a new client.",
        )
        # Deal fields only feed the best-effort first deal
        unparsed = e.unparsed_deal_fields
        for field_name, value in unparsed.items():
            report.add_warning(field_name, "Value is not a number", value)
        if "dealValue" not in unparsed:
            FieldValidators.validate_non_negative_number(
                e.deal_value, "dealValue", report, as_warning=True
            )
        if "dealProbability" not in unparsed:
            FieldValidators.validate_number_range(
                e.deal_probability, "dealProbability", report, 0, 100, as_warning=True
            )
        FieldValidators.validate_choice(
            e.deal_stage, "dealStage", report, DEAL_STAGES, as_warning=True
        )

    def _create_contact(self, e, report: ValidationReport) -> None:
        if not _text(e.contact_first_name) or not _text(e.contact_last_name):
            report.add_error(
                "contactFirstName / contactLastName",
                "Contact first and last name are required",
                guidance="Please provide both first and last name for the contact.",
            )

    def _create_deal(self, e, report: ValidationReport) -> None:
        FieldValidators.validate_any_present(
            {"dealTitle": e.deal_title, "dealValue": e.deal_value},
            report,
            "Deal title or value is required",
            guidance="Please provide a deal title or value to create a new deal.",
        )
        self._deal_values(e, report)

    def _create_project(self, e, report: ValidationReport) -> None:
        FieldValidators.validate_required_text(
            e.project_title,
            "projectTitle",
            report,
            message="Project title is required",
            guidance="Please provide a project title to create a new project.",
        )
        self._project_values(e, report)

    def _create_time_entry(self, e, report: ValidationReport) -> None:
        FieldValidators.validate_any_present(
            {"timeHours": e.time_hours, "timeDescription": e.time_description},
            report,
            "Time hours or description is required",
            guidance="Please provide either time worked or a description of the work.",
        )
        self._time_values(e, report)

    # Listing

    def _get_deals(self, e, report: ValidationReport) -> None:
        if e.min_value is not None and e.max_value is not None and e.min_value > e.max_value:
            report.add_error(
                "minValue / maxValue",
                "minValue cannot be greater than maxValue",
                (e.min_value, e.max_value),
                guidance="Please check the value range you asked for.",
            )

    # Update and delete targets

    def _company_target(self, e, report: ValidationReport) -> None:
        FieldValidators.validate_any_present(
            {"companyId": e.company_id, "companyName": e.company_name},
            report,
            "Company id or name is required",
            guidance="Please tell me which company you mean.",
        )

    def _contact_target(self, e, report: ValidationReport) -> None:
        FieldValidators.validate_required_text(
            e.contact_id,
            "contactId",
            report,
            message="Contact id is required",
            guidance="Please tell me which contact you mean.",
        )

    def _deal_target(self, e, report: ValidationReport) -> None:
        FieldValidators.validate_any_present(
            {"dealId": e.deal_id, "dealTitle": e.deal_title},
            report,
            "Deal id or title is required",
            guidance="Please tell me which deal you mean.",
        )

    def _project_target(self, e, report: ValidationReport) -> None:
        FieldValidators.validate_required_text(
            e.project_id,
            "projectId",
            report,
            message="Project id is required",
            guidance="Please tell me which project you mean.",
        )

    def _time_entry_target(self, e, report: ValidationReport) -> None:
        FieldValidators.validate_required_text(
            e.time_entry_id,
            "timeEntryId",
            report,
            message="Time entry id is required",
            guidance="Please tell me which time entry you mean.",
        )

    def _update_deal(self, e, report: ValidationReport) -> None:
        self._deal_target(e, report)
        self._deal_values(e, report)

    def _update_project(self, e, report: ValidationReport) -> None:
        self._project_target(e, report)
        self._project_values(e, report)
        FieldValidators.validate_number_range(
            e.progress_percentage, "progressPercentage", report, 0, 100
        )
        for field_name, changes in (
            ("updateResources", e.update_resources),
            ("updateExpenses", e.update_expenses),
        ):
            for change in changes or []:
                FieldValidators.validate_required_text(
                    change.get("id"),
                    f"{field_name}.id",
                    report,
                    message="Line item id is required",
                    guidance="Please tell me which resource or expense to change.",
                )

    def _update_time_entry(self, e, report: ValidationReport) -> None:
        self._time_entry_target(e, report)
        self._time_values(e, report)

    # Value checks shared by create and update

    def _deal_values(self, e, report: ValidationReport) -> None:
        FieldValidators.validate_non_negative_number(e.deal_value, "dealValue", report)
        FieldValidators.validate_number_range(
            e.deal_probability, "dealProbability", report, 0, 100
        )
        FieldValidators.validate_choice(e.deal_stage, "dealStage", report, DEAL_STAGES)

    def _project_values(self, e, report: ValidationReport) -> None:
        FieldValidators.validate_non_negative_number(
            e.project_budget, "projectBudget", report
        )
        FieldValidators.validate_number_range(
            e.contingency_percentage, "contingencyPercentage", report, 0, 100
        )
        FieldValidators.validate_choice(
            e.project_status, "projectStatus", report, PROJECT_STATUSES
        )

    def _time_values(self, e, report: ValidationReport) -> None:
        FieldValidators.validate_positive_number(e.time_hours, "timeHours", report)
        FieldValidators.validate_non_negative_number(e.hourly_rate, "hourlyRate", report)


def _text(value) -> bool:
    return value is not None and bool(str(value).strip())
