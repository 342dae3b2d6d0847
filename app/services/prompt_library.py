# /app/services/prompt_library.py

"""
Central library for the master prompts used by the AI services. Literal
braces in the JSON examples are doubled because every prompt is filled with
`str.format`.
"""

RISK_ANALYSIS_PROMPT = """
You are an AI model specialized in predicting student academic risk levels. Analyze the following student data and provide a risk assessment.

**--- STUDENT INFORMATION ---**
- Name: {student_name}
- Grade: {grade}
- Enrollment Duration: {enrollment_duration} days
- Overall GPA: {overall_gpa}
- Overall Attendance Rate: {overall_attendance_rate}%

**--- RECENT PERFORMANCE (LAST 30 DAYS) ---**
- Recent Attendance Rate: {recent_attendance_rate:.1f}%
- Recent Grade Average: {recent_grade_average:.1f}%
- Negative Behavior Incidents: {negative_incidents}
- Positive Behavior Incidents: {positive_incidents}
- Total Behavior Records: {total_behavior_incidents}

**--- OUTPUT FORMAT ---**
Provide your analysis in the following JSON format:
{{
  "riskScore": [number between 0 and 1],
  "riskLevel": ["Low" | "Medium" | "High"],
  "confidence": [number between 0 and 1],
  "factors": [
    {{
      "feature": "feature name",
      "impact": [number between -1 and 1, where positive means increases risk],
      "description": "explanation of this factor's impact"
    }}
  ],
  "reasoning": "Brief explanation of the risk assessment"
}}

**--- RISK LEVEL GUIDELINES ---**
- Low (0.0-{low_cutoff}): Student is performing well with minimal risk indicators
- Medium ({low_cutoff}-{medium_cutoff}): Student shows some concerning patterns that need monitoring
- High ({medium_cutoff}-1.0): Student requires immediate intervention and support

Consider factors like:
- Attendance trends (recent vs overall)
- Academic performance trends
- Behavioral patterns
- Grade level expectations
- Duration of enrollment (adjustment period for new students)

Your entire response must be ONLY the JSON object.
"""
