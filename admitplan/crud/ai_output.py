from sqlalchemy.orm import Session
from admitplan.models import AIOutput
from typing import Optional

ACTION_PLAN = "ACTION_PLAN"

def save_ai_output(db: Session, student_id: int, response: str, prompt: Optional[str] = None, type: str = ACTION_PLAN) -> AIOutput:
    """Store a raw generative-text response"""
    db_output = AIOutput(student_id=student_id, type=type, prompt=prompt, response=response)
    db.add(db_output)
    db.commit()
    db.refresh(db_output)
    return db_output

def get_action_plan_output(db: Session, student_id: int, output_id: int) -> Optional[AIOutput]:
    """Get a stored action-plan response owned by the student"""
    return db.query(AIOutput).filter(
        AIOutput.id == output_id,
        AIOutput.student_id == student_id,
        AIOutput.type == ACTION_PLAN
    ).first()
