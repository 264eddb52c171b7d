from setuptools import setup, find_packages

setup(
    name="ai-analyst",
    version="1.0.0",
    packages=find_packages(include=['ai_analyst', 'ai_analyst.*']),
    install_requires=[
        "langchain-core>=0.3.0",
        "langchain-openai>=0.2.0",
        "openai>=1.0.0",
        "httpx>=0.27.0",
        "pandas>=2.0.0",
        "pydantic>=2.0.0",
        "python-dotenv>=1.0.0",
        "fastapi>=0.109.0",
        "uvicorn>=0.27.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-mock>=3.10.0",
            "respx>=0.21.0",
        ],
    },
    python_requires=">=3.11",
)
