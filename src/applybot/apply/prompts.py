"""Prompt templates for answering easy-apply questions.

Three templates, one per answer shape: pick one of the options, write a short
free-text answer, or estimate a number of years of experience. All personal
data comes from the candidate profile; nothing is hardcoded.
"""

import json
import textwrap

OPTIONS_TEMPLATE = textwrap.dedent("""\
    The following is a resume and an answered question about the resume, the answer is one of the options.

    ## Rules
    - Never choose the default/placeholder option, examples are: 'Select an option', 'None', 'Choose from the options below', etc.
    - The answer must be one of the options.
    - The answer must exclusively contain one of the options.

    ## Example
    My resume: I'm a software engineer with 10 years of experience on swift, python, C, C++.
    Question: How many years of experience do you have on python?
    Options: ["1-2", "3-5", "6-10", "10+"]
    10+

    -----

    ## My resume:
    ```
    {text_resume}
    {work_preferences}
    ```

    ## Question:
    {question}

    ## Options:
    {options}
    -----
    Do not output anything else in the response other than the answer and make sure it's the complete option which is present inside double quotes.
    """)

NUMERIC_TEMPLATE = textwrap.dedent("""\
    Read the following resume carefully and answer the specific question regarding the candidate's experience with a number of years. Follow these guidelines when responding:

    1. Related and inferred experience:
       - If experience with a specific technology is not explicitly stated, but the candidate has experience with similar or related technologies, provide a plausible number of years reflecting this related experience.
       - Examine the candidate's projects and studies to infer skills not explicitly mentioned.

    2. Indirect experience and academic background:
       - Consider the type of university, course, grades and thesis.
       - Evaluate the roles and responsibilities held to estimate experience with specific technologies or skills.

    3. Experience estimates:
       - A response of "0" is forbidden. If direct experience cannot be confirmed, provide a minimum of "2" years based on inferred or related experience.
       - For high levels of experience, provide a number based on clear evidence from the resume.

    4. Answer the question directly with a number.

    ## Example
    ```
    ## Curriculum

    I am a software engineer with 5 years of experience in Swift and Python. I have worked on an AI project.

    ## Question

    How many years of experience do you have with AI?

    ## Answer

    2
    ```

    ## Resume:
    ```
    {text_resume}
    ```

    ## Question:
    {question}

    ---

    Do not output anything else in the response other than the answer.
    """)

TEXT_TEMPLATE = textwrap.dedent("""\
    The following is a resume, job application profile, and job description provided to answer a question about the candidate's suitability.

    ## Rules
    - Use the resume, job application profile, or job description to determine the best response.
    - Answer concisely and accurately, using only relevant details.
    - Do not include any additional explanations or formatting beyond the direct answer.

    ## Example
    ```
    ## Resume

    John Doe, experienced software engineer with expertise in Python, JavaScript, and cloud technologies.

    ## Job Application Profile

    Preferred work location: Remote.

    ## Question

    What is your preferred work location?

    ## Answer

    Remote
    ```

    ## Provided Information:
    ```
    {text_resume}
    {work_preferences}
    ```

    ## Job Description:
    ```
    {job_description}
    ```

    ## Question:
    {question}

    ---

    Do not output anything else in the response other than the answer.
    """)


def build_options_prompt(question: str, options: list[str], text_resume: str, work_preferences: str) -> str:
    return OPTIONS_TEMPLATE.format(
        text_resume=text_resume,
        work_preferences=work_preferences,
        question=question,
        options=json.dumps(options, ensure_ascii=False),
    )


def build_numeric_prompt(question: str, text_resume: str) -> str:
    return NUMERIC_TEMPLATE.format(text_resume=text_resume, question=question)


def build_text_prompt(question: str, text_resume: str, work_preferences: str, job_description: str = "") -> str:
    return TEXT_TEMPLATE.format(
        text_resume=text_resume,
        work_preferences=work_preferences,
        job_description=job_description or "Not provided",
        question=question,
    )
