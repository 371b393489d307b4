"""
Growth Prompts - Templates for every TubeGrow dashboard tool.

Each builder returns the user prompt for one tool, already carrying the
output-language directive. Grounded prompts (trends, audit, channel info)
have an ungrounded twin used when no search-capable provider answers.

Usage:
======
    from tubegrow.ai.prompts.growth_prompts import build_metadata_prompt

    prompt = build_metadata_prompt("sourdough for beginners", "friendly", Language.VI)
"""

from tubegrow.ai.schemas.request import Language


# ---------------------------------------------------------------------------
# LANGUAGE DIRECTIVE
# ---------------------------------------------------------------------------

def language_directive(language: Language, subject: str = "content") -> str:
    """One-line instruction pinning the output language."""
    return f"IMPORTANT: The {subject} MUST be generated in {language.display_name}."


# ---------------------------------------------------------------------------
# OPTIMIZER / SCRIPT WRITER
# ---------------------------------------------------------------------------

def build_metadata_prompt(topic: str, tone: str, language: Language) -> str:
    return f"""You are a YouTube SEO Expert. Generate metadata for a video about "{topic}". Tone: {tone}.
{language_directive(language)}
Return a JSON object with:
1. 5 click-worthy, high CTR titles.
2. A compelling video description (first 2 lines are hooks).
3. 15 comma-separated tags.

JSON Structure: {{ "titles": [], "description": "", "tags": "" }}"""


def build_script_prompt(title: str, points: str, language: Language) -> str:
    return f"""Write a full YouTube video script for the title: "{title}".
Key points to cover: {points}.
{language_directive(language, "entire script")}
Structure: Hook (0-30s), Intro, Body, CTA, Outro.
Use Markdown formatting. Make it engaging."""


# ---------------------------------------------------------------------------
# TREND HUNTER
# ---------------------------------------------------------------------------

def build_trends_prompt(niche: str, language: Language) -> str:
    return f"""Find the latest trending topics and news in the "{niche}" niche using Google Search.
Identify 5 breakout trends that would make good YouTube videos right now.
For each trend, suggest a video angle.
{language_directive(language, "response")}
Format the output as a clean Markdown list. Include links to sources where possible."""


def build_evergreen_trends_prompt(niche: str, language: Language) -> str:
    return f'Suggest 5 evergreen trending topics for "{niche}" in {language.display_name}.'


# ---------------------------------------------------------------------------
# THUMBNAILS
# ---------------------------------------------------------------------------

def build_thumbnail_rating_prompt(context: str, language: Language) -> str:
    return f"""Analyze this YouTube thumbnail. Video Context: {context or 'General YouTube Video'}.
{language_directive(language, "analysis")}
Provide: CTR Score (1-10), 3 Strengths, 3 Weaknesses, and Actionable advice."""


def build_thumbnail_image_prompt(prompt: str, aspect_ratio: str) -> str:
    return f"YouTube Thumbnail, High CTR, {aspect_ratio} aspect ratio style. {prompt}"


# ---------------------------------------------------------------------------
# VIDEO AUDIT
# ---------------------------------------------------------------------------

AUDIT_JSON_SHAPE = """{
    "videoTitle": "Found Title",
    "channelName": "Found Channel Name",
    "score": 85,
    "summary": "Short explanation.",
    "positives": ["Good point 1", "Good point 2"],
    "negatives": ["Improvement 1", "Improvement 2"],
    "suggestions": ["Action 1", "Action 2"]
}"""


def build_audit_prompt(url: str, language: Language) -> str:
    return f"""You are a YouTube Algorithm Expert.
I have a YouTube video Link: {url}

TASK:
1. Use Google Search to find the EXACT Title and EXACT Channel Name of this video.
2. Analyze why this video is good or bad.
3. CRITICAL: Provide the response entirely in {language.display_name}.

RETURN RAW JSON ONLY (Start with {{ and end with }}). NO MARKDOWN.
{AUDIT_JSON_SHAPE}"""


def build_audit_inference_prompt(url: str, language: Language) -> str:
    return f"""I have a video URL: {url}. Since you can't browse, infer the likely topic \
and give generic advice for this type of video in {language.display_name}.
Return JSON format {{ "videoTitle": "Unknown", "channelName": "Unknown", "score": 50, \
"summary": "...", "positives": [], "negatives": [], "suggestions": [] }}."""


# ---------------------------------------------------------------------------
# VIRAL STRATEGY
# ---------------------------------------------------------------------------

def build_viral_research_prompt(url: str) -> str:
    return f"Research this video: {url}. What is the title, channel, and why is it successful?"


def build_viral_strategy_prompt(topic: str, language: Language, research: str = "") -> str:
    context = f"Context from Search: {research}" if research else ""
    return f"""You are a World-Class YouTube Strategist.
Topic/Input: "{topic}".
{context}

Generate a Viral Strategy in {language.display_name}.

Return RAW JSON ONLY. Structure:
{{
  "originalChannel": "N/A",
  "strategyTitle": "Viral Strategy Title",
  "trendContext": "Why is this relevant?",
  "analysis": {{
    "strengths": ["S1", "S2"],
    "weaknesses": ["W1", "W2"]
  }},
  "targetAudience": "Audience Description",
  "metadata": {{
    "titleOptions": ["T1", "T2"],
    "description": "Desc",
    "tags": ["tag1", "tag2"]
  }},
  "thumbnailIdea": {{
    "visualDescription": "Detailed visual description for AI generator",
    "textOverlay": "Text on thumbnail"
  }},
  "scriptOutline": {{
    "hook": "Hook",
    "contentBeats": ["B1", "B2"],
    "cta": "CTA"
  }},
  "promotionPlan": ["P1", "P2"]
}}"""


# ---------------------------------------------------------------------------
# CHANNEL INFO
# ---------------------------------------------------------------------------

CHANNEL_JSON_SHAPE = """{
    "name": "Channel Name",
    "subscriberCount": "1.5M",
    "viewCount": "250M",
    "videoCount": "450",
    "avatar": "https://upload.wikimedia.org/wikipedia/commons/e/ef/Youtube_logo.png",
    "recentVideos": [
        {
            "title": "Video Title",
            "views": "View count string",
            "publishedAt": "e.g. 2 days ago",
            "url": "https://youtube.com/...",
            "thumbnail": "https://img.youtube.com/vi/[VIDEO_ID]/mqdefault.jpg"
        }
    ]
}"""


def build_channel_info_prompt(query: str, language: Language) -> str:
    return f"""You are a YouTube Data Analyst.
TASK: Use Google Search to find detailed information about the YouTube channel matching: "{query}".

I need:
1. Exact Channel Name
2. Approximate Subscriber Count
3. Total View Count (if available)
4. Total Video Count (approx)
5. 4 Most Recent or Popular Videos (Title, Views, Date, URL)

Write any free-text values in {language.display_name}.
Return RAW JSON ONLY (Start with {{ and end with }}). NO MARKDOWN.
{CHANNEL_JSON_SHAPE}"""


def build_channel_template_prompt(query: str) -> str:
    return f"""Generate a JSON template for YouTube channel info for query "{query}".
Use this structure:
{CHANNEL_JSON_SHAPE}"""


# ---------------------------------------------------------------------------
# VIDEO ANALYZER / STUDIO
# ---------------------------------------------------------------------------

DEFAULT_VIDEO_ANALYSIS_REQUEST = "Analyze this video's visual content, audio, and pacing."


def build_video_analysis_prompt(context: str, language: Language) -> str:
    return f"""{context or DEFAULT_VIDEO_ANALYSIS_REQUEST}
Give YouTube-specific feedback on hook strength, retention risks and editing.
{language_directive(language, "analysis")}
Use Markdown formatting."""


TRANSCRIBE_PROMPT = "Transcribe this audio exactly. Return only the transcript text."


# ---------------------------------------------------------------------------
# CHAT ASSISTANT
# ---------------------------------------------------------------------------

def build_chat_system_prompt(language: Language) -> str:
    return f"""You are TubeGrow Assistant, an expert YouTube growth strategist.
You help creators with SEO, titles, thumbnails, scripts, content ideas,
audience retention and channel strategy.
Be concrete and actionable. Prefer short lists over long paragraphs.
Reply in {language.display_name} unless the user writes in another language."""
