"""Social Media Agent"""

from ..llm import QueryComplexity
from .base_agent import BaseAgent, pick


def _create_post(task):
    return f"""
Create an engaging {pick(task, "platform", default="social media")} post about:
{pick(task, "content", "topic")}

Include a hook, the key message, a call to action and 3-5 relevant hashtags.
"""


def _schedule_content(task):
    return f"""
Propose a posting schedule for {pick(task, "platform", default="our social channels")}.
Topic: {pick(task, "content", "topic")}
Timeframe: {pick(task, "timeframe", default="next week")}

List dates, times and a one-line idea for each post.
"""


def _analyze_engagement(task):
    return f"""
Analyze the engagement of these social media posts and suggest improvements:

{pick(task, "content", "posts")}
"""


def _respond_comment(task):
    return f"""
Write a friendly, on-brand reply to this comment:

"{pick(task, "comment", "content")}"
"""


def _hashtag_research(task):
    return f"""
Suggest 15 hashtags for {pick(task, "platform", default="social media")} about {pick(task, "topic", "content")},
grouped into broad, niche and branded.
"""


def _competitor_analysis(task):
    return f"""
Analyze the social media presence of these competitors: {pick(task, "competitors", "content")}.

Cover content strategies, posting frequency, engagement and opportunities for us.
"""


class SocialAgent(BaseAgent):
    """Creates and schedules posts, researches hashtags and competitors"""

    agent_type = "social"
    system_prompt = "You are a creative social media manager for a small business."
    PROMPTS = {
        "create_post": (QueryComplexity.MEDIUM, _create_post),
        "schedule_content": (QueryComplexity.SIMPLE, _schedule_content),
        "analyze_engagement": (QueryComplexity.MEDIUM, _analyze_engagement),
        "respond_comment": (QueryComplexity.SIMPLE, _respond_comment),
        "hashtag_research": (QueryComplexity.SIMPLE, _hashtag_research),
        "competitor_analysis": (QueryComplexity.COMPLEX, _competitor_analysis),
    }
