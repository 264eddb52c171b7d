from langchain_core.prompts import PromptTemplate

# ✅ Prompt for the opening insights shown when a conversation starts
PROMPT_INITIAL_INSIGHTS = PromptTemplate.from_template("""
Based on this data analysis, provide:
1. A brief overview of the key insights (2-3 sentences)
2. 6-10 suggested questions/keywords that users might want to explore (mix of basic and advanced questions)
3. 2-3 visual suggestions for charts that would be most insightful

Data: {file_name}
Category: {category}
Analysis: {analysis}

For suggested keywords, include:
- Basic analysis questions (e.g., "What are the top performers?")
- Trend analysis questions (e.g., "How have sales changed over time?")
- Comparative questions (e.g., "Which categories perform best?")
- Actionable insight questions (e.g., "What should we focus on to improve?")
- Industry-specific questions relevant to {category}

Respond in this exact JSON format:
{{
  "overview": "Brief overview of key insights",
  "suggestedKeywords": ["keyword1", "keyword2", "keyword3", "keyword4", "keyword5", "keyword6"],
  "visualSuggestions": [
    {{
      "type": "chart_type",
      "title": "Chart title",
      "description": "Why this chart would be useful"
    }}
  ]
}}
""")

# ✅ Prompt for questions answered from precomputed statistics
PROMPT_ANALYSIS = PromptTemplate.from_template("""
You are an expert AI data analyst with access to comprehensive data analysis results. Your role is to:

1. **Provide insightful analysis** based on the available data
2. **Suggest relevant visualizations** when appropriate
3. **Answer questions naturally** while staying focused on the data context
4. **Generate actionable insights** that help users understand their data
5. **Provide context-aware recommendations** based on the industry/category

**Available Data Context:**
- File: {file_name}
- Category: {category}
- Analysis Results: {analysis}
{summary}
**User Question:** "{question}"

**Response Guidelines:**
- Be conversational but professional
- Provide specific insights based on the data
- When suggesting visualizations, include them in JSON format
- If the question is off-topic, gently redirect to data-related topics
- Always provide value and actionable insights
- Use industry-specific terminology when relevant
- Suggest follow-up questions that might be interesting

**For Visualizations, use this format:**
```json
{{
  "type": "chart_type",
  "title": "Chart Title",
  "description": "Why this visualization is useful and what insights it provides",
  "data": [
    {{"name": "Category A", "value": 100}},
    {{"name": "Category B", "value": 150}}
  ]
}}
```

**Supported chart types:** bar, line, pie, area, scatter

**Industry-specific insights for {category}:**
- Focus on relevant KPIs and metrics for this industry
- Suggest actionable recommendations based on industry best practices
- Consider seasonal trends and industry-specific patterns
- Provide benchmarking insights when possible

Provide a comprehensive, helpful response that addresses the user's question while leveraging the available data insights and industry context.
""")

# ✅ Prompt for questions answered from the record-level dataset
PROMPT_RAW_DATA = PromptTemplate.from_template("""You are an expert AI data analyst. The user wants insights from the raw/original data, not technical statistics.

Here is the raw data (as JSON array):
{raw_data}

User question: "{question}"

Instructions:
- Give a simple, user-friendly summary of what this data is about.
- Highlight any obvious patterns, trends, or interesting facts, but avoid technical/statistical terms (like mean, median, stddev, etc.).
- Use plain language suitable for a non-technical audience.
- If possible, suggest what a normal business user might want to know or do with this data.
- If the data is too large, summarize only the first 100 rows.

TABLE FORMATTING:
- If the user asked for a table, show a small sample (first 5-10 rows) in markdown table format.
- Format dates as YYYY-MM-DD (remove time if present)
- Format numbers with appropriate precision (2 decimal places for currency, whole numbers for counts)
- Clean up column names (remove underscores, capitalize properly)
- Use consistent formatting across all rows

Example table format:
| Date | Region | Product | Units Sold | Total Revenue |
|------|--------|---------|------------|---------------|
| 2024-01-02 | North | Smartphone | 2 | $1,398.00 |
| 2024-01-03 | West | T-Shirt | 5 | $125.00 |

CHART GENERATION:
If the user asks for a chart or visualization, generate a JSON chart object in this exact format:
```json
{{
  "type": "bar|line|pie|scatter",
  "title": "Chart Title",
  "data": [
    {{"label": "Category 1", "value": 100}},
    {{"label": "Category 2", "value": 200}}
  ]
}}
```

Chart types:
- "bar" for comparing categories
- "line" for trends over time
- "pie" for showing proportions
- "scatter" for correlations

Always include the JSON chart object when the user asks for visualizations or charts.
""")

# Transcript notices and user-facing fallbacks
RAW_CONTEXT_NOTICE_PREFIX = "Raw data context loaded"
RAW_CONTEXT_NOTICE = (
    RAW_CONTEXT_NOTICE_PREFIX + " for this file: {file_name}. "
    "Use this data for all future questions in Raw Data Insights mode."
)
RAW_CONTEXT_REMINDER = "You already have the raw data for this file. Use it for your answer."

QUOTA_LIMIT_MESSAGE = "You have reached your AI prompt limit. Please upgrade your plan to continue using AI insights."
QUOTA_UNAVAILABLE_MESSAGE = "We couldn't verify your AI prompt usage right now. Please try again in a moment."
RAW_DATA_UNAVAILABLE_MESSAGE = "Raw data is not available for this file."
RAW_DATA_FAILURE_MESSAGE = "Sorry, I could not fetch or analyze the raw data."
ANALYSIS_FAILURE_MESSAGE = "I apologize, but I encountered an error while processing your request. Please try again."


def get_initial_insights_prompt(file_name: str, category: str, analysis: str) -> str:
    """Get the prompt that asks for an overview, keywords and visual suggestions."""
    return PROMPT_INITIAL_INSIGHTS.format(file_name=file_name, category=category or "general", analysis=analysis)


def get_analysis_prompt(file_name: str, category: str, analysis: str, summary: str, question: str) -> str:
    """Get the prompt for the aggregate-statistics strategy."""
    if not question:
        raise ValueError("Question cannot be empty")
    return PROMPT_ANALYSIS.format(
        file_name=file_name,
        category=category or "general",
        analysis=analysis,
        summary=f"\n{summary}\n" if summary else "",
        question=question
    )


def get_raw_data_prompt(raw_data: str, question: str) -> str:
    """Get the prompt for the record-level strategy."""
    if not question:
        raise ValueError("Question cannot be empty")
    return PROMPT_RAW_DATA.format(raw_data=raw_data, question=question)


def get_greeting(file_name: str, overview: str = None, keywords=None, visuals=None, category: str = None) -> str:
    """Opening assistant message; falls back to a plain greeting without an overview."""
    if not overview:
        return (
            f"Hi there! 👋 I'm your AI data analyst. I've analyzed your {file_name} file and I'm here "
            "to help you understand what the data is telling us. What would you like to explore?"
        )
    parts = [
        f"Hi there! 👋 I'm your AI data analyst. I've analyzed your {file_name} file and here's what I found:",
        "",
        "**📊 Key Insights:**",
        overview,
    ]
    if keywords:
        parts += ["", "**💡 You can ask me about:**"] + [f"• {keyword}" for keyword in keywords]
    if visuals:
        parts += ["", "**📈 Suggested Visualizations:**"] + [
            f"• {viz.get('title', '')}: {viz.get('description', '')}" for viz in visuals
        ]
    if category:
        parts += [
            "",
            f"**🎯 Industry Focus:** Since this is {category} data, I can provide industry-specific insights and recommendations."
        ]
    parts += ["", "What would you like to explore first?"]
    return "\n".join(parts)
