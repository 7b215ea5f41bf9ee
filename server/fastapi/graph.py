import logging
from typing import Literal

import httpx
from typing_extensions import TypedDict

from langgraph.graph import StateGraph, START, END
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import PromptTemplate
from langchain_core.runnables import RunnableConfig

from config import Settings, get_settings
from models import WeatherResult
from tools import fetch_weather

logger = logging.getLogger(__name__)

NO_CITY = "none"

CITY_EXTRACTION_PROMPT = PromptTemplate.from_template(
    'Identify the city name in this text: "{message}". '
    "Respond with ONLY the city name. If no city is mentioned, respond with 'none'."
)

GROUNDED_RESPONSE_PROMPT = PromptTemplate.from_template(
    'User asked: "{message}". We found this weather data: {weather}. '
    "Please provide a friendly and natural response incorporating this data."
)


class State(TypedDict):
    """State schema for one chat turn."""
    message: str
    city: str
    weather: WeatherResult | None
    response: str


# --- LLM calls ---


async def extract_city(llm: BaseChatModel, message: str) -> str:
    """Ask the model which city the message mentions.

    Returns the lowercased city name, or NO_CITY.
    """
    chain = CITY_EXTRACTION_PROMPT | llm | StrOutputParser()
    answer = await chain.ainvoke({"message": message})
    return answer.strip().lower()


async def synthesize(llm: BaseChatModel, message: str, grounding: str | None = None) -> str:
    """Generate the reply, weaving in weather data when provided."""
    if grounding is None:
        chain = llm | StrOutputParser()
        return await chain.ainvoke(message)

    chain = GROUNDED_RESPONSE_PROMPT | llm | StrOutputParser()
    return await chain.ainvoke({"message": message, "weather": grounding})


# --- Nodes ---


def _configurable(config: RunnableConfig) -> dict:
    return config.get("configurable", {})


async def extract_intent(state: State, config: RunnableConfig):
    """Classify the message: a city name or NO_CITY."""
    llm = _configurable(config)["llm"]
    city = await extract_city(llm, state["message"])
    if city != NO_CITY:
        logger.info("Detected city %r", city)
    return {"city": city}


async def ground(state: State, config: RunnableConfig):
    """Look up the weather for the detected city."""
    configurable = _configurable(config)
    http_client: httpx.AsyncClient = configurable["http_client"]
    settings: Settings = configurable.get("settings") or get_settings()

    result = await fetch_weather(
        http_client,
        state["city"],
        geocoding_url=settings.geocoding_url,
        weather_url=settings.weather_url,
        user_agent=settings.geocoder_user_agent,
    )
    return {"weather": result}


async def respond(state: State, config: RunnableConfig):
    """Produce the final reply, grounded if a weather lookup ran."""
    llm = _configurable(config)["llm"]
    weather = state.get("weather")
    grounding = weather.to_text() if weather is not None else None
    return {"response": await synthesize(llm, state["message"], grounding)}


def route_after_intent(state: State) -> Literal["ground", "respond"]:
    """Look up weather only when a city was detected."""
    if state.get("city", NO_CITY) == NO_CITY:
        return "respond"
    return "ground"


# Build the graph
graph_builder = StateGraph(State)
graph_builder.add_node("extract_intent", extract_intent)
graph_builder.add_node("ground", ground)
graph_builder.add_node("respond", respond)

graph_builder.add_edge(START, "extract_intent")
graph_builder.add_conditional_edges("extract_intent", route_after_intent, ["ground", "respond"])
graph_builder.add_edge("ground", "respond")
graph_builder.add_edge("respond", END)

graph = graph_builder.compile()


async def run_chat_turn(
    message: str,
    llm: BaseChatModel,
    http_client: httpx.AsyncClient,
    settings: Settings | None = None,
) -> State:
    """Run one chat turn through the graph and return the final state."""
    return await graph.ainvoke(
        {"message": message},
        config={"configurable": {"llm": llm, "http_client": http_client, "settings": settings}},
    )
