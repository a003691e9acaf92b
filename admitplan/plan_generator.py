import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from langchain_anthropic import ChatAnthropic
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate
from langchain_ollama import ChatOllama
from sqlalchemy.orm import Session

from admitplan import crud
from admitplan.config import settings
from admitplan.models import AIOutput

logger = logging.getLogger(__name__)


def get_generator():
    """Factory function to return the appropriate generator based on config"""
    if settings.ai_provider.lower() == "claude":
        return ClaudePlanGenerator()
    else:
        return OllamaPlanGenerator()


class BasePlanGenerator:
    """
    Base class for AI-written 12-week admissions action plans.

    The model answers in plain text; structure is recovered later by
    plan_converter.parse_free_text, so the prompt only asks for week headings
    and bullet lines.
    """

    def __init__(self):
        self.llm = None
        self.parser = StrOutputParser()

    def generate_action_plan(
        self,
        student_name: str,
        schedules: List[Dict[str, Any]],
        start_date: date,
        focus_request: Optional[str] = None
    ) -> str:
        """
        Generate a raw action plan text.

        Args:
            student_name: Student display name
            schedules: Upcoming admission events ({school, title, start_date})
            start_date: First day of week 1
            focus_request: Optional emphasis (e.g., "interview practice")

        Returns:
            Plan text with "N주차" headings and "- " task lines
        """
        prompt = ChatPromptTemplate.from_messages([
            ("system", self._build_system_prompt()),
            ("human", "{context}")
        ])
        context = self._build_context(student_name, schedules, start_date, focus_request)
        logger.debug("Plan prompt for %s:\n%s", self.__class__.__name__, context)

        chain = prompt | self.llm | self.parser
        return chain.invoke({"context": context})

    def _build_system_prompt(self) -> str:
        """Build system prompt for LLM"""
        return """You are an admissions consultant writing a 12-week action plan for a middle-school student applying to high schools.

**Output format (plain text, no JSON):**
- One heading line per week: "1주차", "2주차", ... "12주차"
- Under each heading, 1 to 3 task lines, each starting with "- "
- Each task line is a short, concrete action (under 60 characters)

**Planning principles:**
- Front-load school research and grade review in weeks 1-2
- Schedule reading, club and volunteer activities through the middle weeks
- Reserve weeks 11-12 for document checks and interview practice
- Place each task before the admission event it prepares for"""

    def _build_context(
        self,
        student_name: str,
        schedules: List[Dict[str, Any]],
        start_date: date,
        focus_request: Optional[str]
    ) -> str:
        end_date = start_date + timedelta(days=83)
        context = f"""**Student:** {student_name}
**Plan period:** {start_date:%Y-%m-%d} to {end_date:%Y-%m-%d}

**Upcoming admission events:**
{self._format_schedules(schedules)}
"""
        if focus_request:
            context += f"\n**Focus request:** {focus_request}"
        return context

    def _format_schedules(self, schedules: List[Dict[str, Any]]) -> str:
        if not schedules:
            return "No target school schedules registered."

        items = []
        for schedule in schedules[:20]:  # Limit to prevent token overflow
            items.append(f"  - {schedule['school']}: {schedule['title']} ({schedule['start_date']:%Y-%m-%d})")
        return "\n".join(items)


class OllamaPlanGenerator(BasePlanGenerator):
    """Generator using local Ollama for development"""

    def __init__(self):
        super().__init__()
        self.llm = ChatOllama(
            model=settings.ollama_model,
            base_url=settings.ollama_base_url,
            temperature=0.2
        )


class ClaudePlanGenerator(BasePlanGenerator):
    """Generator using Claude API for production"""

    def __init__(self):
        super().__init__()
        if not settings.claude_api_key:
            raise ValueError("CLAUDE_API_KEY not set in environment variables")

        self.llm = ChatAnthropic(
            model=settings.claude_model,
            api_key=settings.claude_api_key,
            temperature=0.2
        )


def generate_and_store(
    db: Session,
    student_id: int,
    start_date: date,
    generator: Optional[BasePlanGenerator] = None,
    focus_request: Optional[str] = None
) -> AIOutput:
    """Ask the model for a plan and keep its raw answer as an ACTION_PLAN output"""
    student = crud.get_user(db, student_id)
    schedules = [
        {"school": school.name, "title": schedule.title, "start_date": schedule.start_date}
        for schedule, school in crud.get_target_schedules_since(db, student_id, start_date)
    ]

    generator = generator or get_generator()
    response = generator.generate_action_plan(
        student.name if student else str(student_id),
        schedules,
        start_date,
        focus_request
    )
    output = crud.save_ai_output(db, student_id, response, prompt=focus_request)
    logger.info("Stored action plan output %s for student %s", output.id, student_id)
    return output
