"""
AI collaborator layer.

Submodules:
  client   : BaseLLMClient interface + GeminiClient (httpx, REST)
  parsing  : JSON extraction and sectioned-text parsing of model output
  prompts  : Prompt builders for every AI feature
  services : DecisionAssistant: extraction, recommendation, deep analysis,
              follow-up questions, reflection prompts, learnings, insights

Credential placement (.env, gitignored):
  GOOGLE_GENERATIVE_AI_API_KEY: Google Generative Language API key
"""
