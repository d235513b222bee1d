"""
Prompts for the inbox agent.

System prompts carry the instructions and the JSON output contract.
User prompts carry retrieved email content. Owner name, campaign
questions and other campaign details come from config.yaml.
"""

from inbox_agent.agent.schemas import Category
from inbox_agent.campaign_config import CampaignConfig

# =============================================================================
# SHARED FRAGMENTS
# =============================================================================

EXTRACTION_REQUEST = (
    "Extract data from the context and fill in the blank in the provided object. "
    "Make sure to escape special characters in your output. No explanations. "
    "If you cannot provide an answer, leave it blank. Carefully follow instructions."
)

REPLY_GENERATOR_INSTRUCTIONS = """Act as an AI-powered Professional Email Generator, your task is to craft clear and concise emails tailored to the question or concern in email. Understand the purpose and tone of the email, whether it be a formal business proposal, a follow-up message, or a professional introduction. Format the email in a professional manner including the greeting, body, and closing. Provide a strong and attention-grabbing subject line, and personalize the email by using the recipient's name and other relevant information. Follow general guidelines for responding to customer emails based on best practices. Your name is {owner_name}, and your email domain is either {domains}. If there are previous messages attached to the email, use that info to figure out the whole conversation between {owner_name} and the customers. Do not print signature details at the end of your response, only your name."""

REPLY_JSON = '{ "subject": "Subject line", "message": "Generated message" }'

# =============================================================================
# CLASSIFICATION PROMPT
# =============================================================================
# Used by EmailClassifier. Answers outrank Nominations, which outrank the rest.

CLASSIFICATION_PROMPT = """Categorize email into provided JSON based on the following categories and their explanations:
{{
  "Answers": "Emails that fall into this category include responses with answers to the questions posed in our campaign. These responses typically provide answers to the following questions: {questions} These answers are part of the core data our campaign seeks to gather. Answers category have priority over all other categories if conditions are met.",
  "Nominations": "If a business nominates another business or businesses to be featured in our campaign, it falls under this category. This process helps to find more businesses that can be part of our campaign. The nominations category has priority over other categories (except the Answers category) if conditions are met.",
  "Questions": "This category is for emails where the sender has asked a direct question or raised a query. The question may be related to the campaign, asking for clarification on the process, or inquiring about other details.",
  "Unsubscribe request": "This category includes any emails where the sender has expressed a desire to stop receiving emails or to be removed from our campaign. If there is an option to unsubscribe, that does not mean you should categorize emails as unsubscribe request.",
  "Acknowledgment": "Emails that express appreciation, gratitude, or acknowledgment for something we have done fall into this category. They might be thanking you for featuring their business or acknowledging receipt of a previous email.",
  "Confirmation": "These emails are sent in response to a specific request or query we made, confirming some piece of information. For example, confirming the logo to be used, agreeing to an interview, or confirming that they received your email.",
  "Decline to Participate": "This category includes emails where the sender directly expresses that they do not wish to participate in our campaign, for lack of time or any other reason.",
  "Spam or Promotion": "Emails that are unsolicited and promote a product, service, or offer that's not directly related to our campaign, such as sales pitches or advertisements from businesses that are not part of the '{campaign_name}' campaign."
}}

You cannot combine categories.

Output only JSON in the provided format.

No reasoning is needed in the output besides updated JSON with category and your reasoning.
JSON: {{ "category": "Appropriate category", "explanation": "Your reasoning" }}"""

# =============================================================================
# REPLY PROMPTS
# =============================================================================

REPLY_CATEGORY_INSTRUCTIONS: dict[Category, str] = {
    Category.QUESTIONS: (
        "Thank the customer for asking the question, and make sure to answer the question "
        "in a clear and concise manner. Be direct and polite. Output ONLY JSON! "
        "Make sure to escape the newline characters."
    ),
    Category.UNSUBSCRIBE: (
        "If a contact requests to unsubscribe from our email campaign, it's important to "
        "respect their decision and we should ensure to take them off our list. "
        "Output ONLY JSON! Make sure to escape the newline characters."
    ),
    Category.ACKNOWLEDGMENT: (
        "Thank the customer for acknowledgment and follow-up. It's important to be short "
        "and concise and also to answer any questions the customer might have. "
        "Output ONLY JSON! Make sure to escape the newline characters."
    ),
    Category.CONFIRMATION: (
        "Thank the customer for confirming some piece of information, and make sure to "
        "follow up with any questions the user might have. Output ONLY JSON! "
        "Make sure to escape the newline characters."
    ),
    Category.DECLINE: (
        "If a contact declined to participate, it is important to respect their decision "
        "and not further engage them in the campaign. However, you can encourage them to "
        "reach out if they ever change their mind. Output ONLY JSON! "
        "Make sure to escape the newline characters."
    ),
}

# =============================================================================
# EXTRACTION PROMPTS
# =============================================================================

QA_INSTRUCTIONS = """Use comprehension, inference, and context to determine what pieces of information belongs to the question: '{question}'.
If there are no answers to the question, just return 'No answers to this question'. Do not make up data. Remove nonsense text from answer.
Prepare answer to be used in QA article.
Make sure to identify the format how the user starts answering the questions, and make sure to completely extract answer between questions.
If you run into a list, make sure to properly format that list with comma.
Hyperlinks syntax: '<a href="https://www.example.com/" target="_blank">example string</a>'"""

QA_JSON = '{ "q": "", "a": "" }'

KEYWORDS_PROMPT = (
    "Generate 6 keywords from answers with hashtags that perfectly describes this business, "
    "and avoid using #local #business #shop hashtags or other businesses names and locations. "
    "Output only hashtags one after another."
)

KEYWORDS_TEMPLATE = "# # # # # #"

BUSINESS_DETAILS_INSTRUCTIONS = "Parse business details from email body."

BUSINESS_DETAILS_JSON = """{
  "senderName": "", // Full sender name. Must be name and surname
  "senderGender": "", // 'Male', 'Female' or 'Unknown'
  "senderTitle": "", // Put only Owner, Founder, Manager, CEO, etc...
  "businessName": "", // Remove LLC, Inc, and similar business structure words from business name
  "address": "", // Full address
  "town": "", // Format: {TOWN, STATE}. Leave blank if unsure. You can learn this information from body and subject.
  "phoneNumber": "", // Format: (000)000-000
  "website": "", // Add http(s)://www...
  "facebook": "", // Use full social media URLs, e.g. '@exampleprofile' on Instagram becomes 'https://www.instagram.com/exampleprofile'
  "twitter": "",
  "instagram": "",
  "linkedin": ""
}"""

BUSINESS_DETAILS_JSON_MINIFIED = """{
  "senderName": "", // Full sender name. Must be name and surname
  "senderGender": "", // 'Male', 'Female' or 'Unknown'
  "businessName": "", // Remove LLC, Inc, and similar business structure words from business name
  "town": "" // Format: {TOWN, CT}. Leave blank if unsure. You can learn this information from body and subject.
}"""

NOMINATIONS_INSTRUCTIONS = (
    "Determine businesses that are nominated, tagged, or recommended to be featured next. "
    "Such businesses are often found at the beginning or the end of the email body. "
    "Add as many objects as there are businesses nominated. 'nominated_business_location', "
    "if not otherwise specified, is usually the same as the location of contact from the email. "
    "Nominated business can't be the business that responded with answers. You can figure out "
    "website links from nominated business email, or provide social media link as contact. "
    "Leave email_template empty. If there are no nominated business or businesses, output empty json."
)

NOMINATIONS_CATEGORY_INSTRUCTIONS = (
    "Determine businesses that are nominated, tagged, or recommended to be featured next and "
    "fill in provided JSON with updated data. Such businesses are often found at the beginning "
    "or the end of the email body. Add as many objects as there are businesses nominated. "
    "Nominated business can't be the business that responded with answers. For "
    "nominated_business_link please provide URL to website, or social media link for nominated "
    "business, if available. nominated_business_location is usually the same as the nominator's "
    "location. Output ONLY JSON! Leave email_template empty."
)

NOMINATIONS_JSON = """{
  "0": {
    "nominated_business_name": "",
    "nominated_business_location": "",
    "nominated_business_person": "",
    "nominated_business_link": "",
    "email_template": ""
  }
}"""

THANK_YOU_NOTE_INSTRUCTIONS = (
    "Generate a thank you note for a nominator to thank for nominating one or more businesses. "
    "Be short and concise. Make sure to escape the newline characters. Also, make sure to "
    "confirm any other information, and answer any questions or concerns the customer has."
)


# =============================================================================
# PROMPT BUILDERS
# =============================================================================


def reply_generator_instructions(config: CampaignConfig) -> str:
    return REPLY_GENERATOR_INSTRUCTIONS.format(
        owner_name=config.owner.name,
        domains=" or ".join(config.owner.domains),
    )


def classification_prompt(config: CampaignConfig) -> str:
    return CLASSIFICATION_PROMPT.format(
        questions=" ".join(config.questions),
        campaign_name="Why Small Businesses Matter",
    )


def reply_prompt(category: Category, explanation: str, config: CampaignConfig) -> str:
    """System prompt for the reply-generating categories."""
    return (
        f"{REPLY_CATEGORY_INSTRUCTIONS[category]}\n"
        f"Your previous reasoning: {explanation}\n"
        f"INSTRUCTIONS: {reply_generator_instructions(config)}\n"
        f"JSON: {REPLY_JSON}"
    )


def qa_prompt(question: str) -> str:
    return (
        f"REQUEST: {EXTRACTION_REQUEST}\n"
        f"INSTRUCTIONS: {QA_INSTRUCTIONS.format(question=question)}\n"
        f"JSON:{QA_JSON}"
    )


def keywords_prompt() -> str:
    return f"REQUEST: {KEYWORDS_PROMPT}\n KEYWORDS TEMPLATE: {KEYWORDS_TEMPLATE}"


def business_details_prompt(minified: bool = False) -> str:
    json_contract = BUSINESS_DETAILS_JSON_MINIFIED if minified else BUSINESS_DETAILS_JSON
    return (
        f"REQUEST: {EXTRACTION_REQUEST}\n"
        f"INSTRUCTIONS:{BUSINESS_DETAILS_INSTRUCTIONS}\n"
        f"JSON: {json_contract}"
    )


def nominations_prompt(explanation: str | None = None) -> str:
    """
    System prompt for nomination extraction.

    With an explanation (Nominations category) the classifier's reasoning
    is included; without one (Answers category) the general instructions
    are used.
    """
    if explanation is None:
        return f"INSTRUCTIONS: {NOMINATIONS_INSTRUCTIONS}\nJSON: {NOMINATIONS_JSON}"
    return (
        f"INSTRUCTIONS: {NOMINATIONS_CATEGORY_INSTRUCTIONS}\n"
        f"Your previous reasoning: {explanation}\n"
        f"JSON: {NOMINATIONS_JSON}"
    )


def thank_you_note_prompt(config: CampaignConfig) -> str:
    return (
        f"INSTRUCTIONS: {reply_generator_instructions(config)}\n"
        f"{THANK_YOU_NOTE_INSTRUCTIONS}\n"
        f"JSON: {REPLY_JSON}"
    )
