import json
import logging
import re

from flask import current_app
from langchain_core.messages import HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI
from marshmallow import ValidationError as SchemaValidationError

from models import Project, Skill
from schemas.planner import DeliverableProposalSchema
from services.common import get_or_404
from services.deliverables import add_skill_to_deliverable, create_deliverable
from services.skills import find_skill_by_name
from utils.errors import ConflictError, DomainError, ValidationError

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r'^```(?:json)?\s*|\s*```$')

PROMPT_TEMPLATE = """You are a project management assistant. Analyze this project and break it down into deliverables with skill requirements.

Project Name: {name}
Project Description: {description}

Available Skills in System:
{skills}

Instructions:
1. Break the project into 3-5 major deliverables
2. For each deliverable, assign 2-4 skills from the AVAILABLE SKILLS LIST ONLY
3. Assign weight (0.0 to 1.0) for each skill based on importance (1.0 = most critical)
4. Use ONLY the skill names exactly as listed above

Return a JSON response (no markdown, just raw JSON):
{{
  "deliverables": [
    {{
      "name": "Deliverable Name",
      "description": "Brief description",
      "skills": [
        {{ "skill_name": "Exact Skill Name", "weight": 0.9 }}
      ]
    }}
  ]
}}"""


def build_llm():
    api_key = current_app.config.get('GEMINI_API_KEY')
    if not api_key:
        raise ValidationError("GEMINI_API_KEY is not configured")

    return ChatGoogleGenerativeAI(
        model=current_app.config.get('GEMINI_MODEL', 'gemini-1.5-flash'),
        temperature=current_app.config.get('GEMINI_TEMPERATURE', 0.3),
        google_api_key=api_key
    )


def build_prompt(project, skills):
    skills_list = "\n".join(
        f"- {s.name}: {s.description}" if s.description else f"- {s.name}"
        for s in skills
    )
    return PROMPT_TEMPLATE.format(
        name=project.name,
        description=project.description or "",
        skills=skills_list,
    )


def parse_proposals(text):
    """Extract the deliverables list from a model reply, tolerating code fences."""
    cleaned = _FENCE_RE.sub('', (text or '').strip())
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError:
        raise DomainError("AI response could not be parsed", 502)

    deliverables = payload.get('deliverables') if isinstance(payload, dict) else None
    if not isinstance(deliverables, list):
        raise DomainError("AI response did not contain deliverables", 502)

    try:
        return DeliverableProposalSchema(many=True).load(deliverables)
    except SchemaValidationError as err:
        logger.warning("Rejected malformed AI proposals: %s", err.messages)
        raise DomainError("AI response did not match the expected format", 502)


def request_deliverable_proposals(project, skills, llm=None):
    if not skills:
        raise ValidationError("No skills available in the system. Please create skills first.")

    llm = llm or build_llm()
    response = llm.invoke([HumanMessage(content=build_prompt(project, skills))])
    return parse_proposals(response.content)


def apply_deliverable_proposals(project_id, proposals):
    """Create deliverables from proposals already loaded by parse_proposals.

    Blank names, duplicates, unknown skills and out-of-range weights are skipped.
    """
    created = []
    for proposal in proposals:
        name = proposal['name'].strip()
        if not name:
            logger.warning("Skipping unnamed deliverable proposal for project %s", project_id)
            continue

        try:
            deliverable = create_deliverable(project_id, name, proposal.get('description'))
        except ConflictError:
            logger.warning("Deliverable %r already exists in project %s, skipped", name, project_id)
            continue

        assigned_skills = []
        for requirement in proposal['skills']:
            skill_name = requirement['skill_name'].strip()
            skill = find_skill_by_name(skill_name) if skill_name else None
            if skill is None:
                logger.warning("Unknown skill %r proposed for deliverable %s", skill_name, deliverable.id)
                continue

            try:
                add_skill_to_deliverable(deliverable.id, skill.id, requirement['weight'])
            except (ValidationError, ConflictError) as exc:
                logger.warning("Could not add skill %s to deliverable %s: %s", skill.name, deliverable.id, exc.message)
                continue

            assigned_skills.append({"skill_name": skill.name, "weight": requirement['weight']})

        created.append({
            "id": deliverable.id,
            "name": deliverable.name,
            "description": deliverable.description,
            "assigned_skills": assigned_skills,
        })

    return created


def analyze_project(project_id, llm=None):
    project = get_or_404(Project, project_id, "Project")
    skills = Skill.query.order_by(Skill.name.asc()).all()

    proposals = request_deliverable_proposals(project, skills, llm=llm)
    created = apply_deliverable_proposals(project.id, proposals)

    logger.info("AI planner created %s deliverables for project %s", len(created), project.id)
    return {
        "project_id": project.id,
        "deliverables_created": len(created),
        "deliverables": created,
    }
