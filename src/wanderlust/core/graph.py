"""LangGraph workflow definition for trip generation."""

from langgraph.graph import StateGraph, END
from typing import Any, Optional

from ..config.settings import logging
from .state import TripFormData, TripGenerationState, TripPlan
from .nodes import generate_plan_node, parse_plan_node, PlanGenerationError

def route_after_generation(state: TripGenerationState) -> str:
    """Routes from generation to parsing, or ends on error."""
    if state.get("error_message") or not state.get("raw_response"):
        logging.info("Conditional Edge: Generation failed. Routing to END.")
        return "error_end"
    logging.info("Conditional Edge: Routing to parse plan.")
    return "parse_plan"

def create_graph(llm: Optional[Any] = None) -> StateGraph:
    """Creates and returns the LangGraph workflow."""
    workflow = StateGraph(TripGenerationState)

    # Add nodes
    workflow.add_node("generate_plan", lambda state: generate_plan_node(state, llm))
    workflow.add_node("parse_plan", parse_plan_node)

    # Define edges
    workflow.set_entry_point("generate_plan")
    workflow.add_conditional_edges(
        "generate_plan",
        route_after_generation,
        {
            "parse_plan": "parse_plan",
            "error_end": END
        }
    )
    workflow.add_edge("parse_plan", END)

    return workflow

def compile_graph(llm: Optional[Any] = None) -> Any:
    """Compiles and returns the LangGraph application."""
    workflow = create_graph(llm)
    try:
        app = workflow.compile()
        logging.info("Trip generation graph compiled successfully.")
        return app
    except Exception as compile_error:
        logging.error(f"Failed to compile LangGraph: {compile_error}", exc_info=True)
        return None

def run_generation(form_data: TripFormData, llm: Optional[Any] = None) -> TripPlan:
    """Generates and decodes a plan, raising PlanGenerationError on failure."""
    app = compile_graph(llm)
    if app is None:
        raise PlanGenerationError("The planning workflow is unavailable.")

    final_state = app.invoke({"form_data": form_data, "raw_response": None, "plan": None, "error_message": None})
    if final_state.get("error_message"):
        raise PlanGenerationError(final_state["error_message"])
    if not final_state.get("plan"):
        raise PlanGenerationError("Something went wrong generating the plan.")
    return final_state["plan"]
