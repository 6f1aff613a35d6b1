"""Curated roadmap templates for common goals.

The catalog is built once at import time and never mutated; every structure
in it is a frozen dataclass or a tuple so it can be shared across requests
and threads without locking.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Tuple


@dataclass(frozen=True)
class PhaseBlueprint:
    title: str
    weeks: int
    description: str
    skills_to_learn: Tuple[str, ...] = ()
    learning_objectives: Tuple[str, ...] = ()
    key_concepts: Tuple[str, ...] = ()
    daily_activities: Tuple[str, ...] = ()
    resources: Tuple[str, ...] = ()
    milestones: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Template:
    id: str
    title: str
    overview: str
    approach: str
    total_estimated_hours: int
    phases: Tuple[PhaseBlueprint, ...]
    difficulty_factors: Tuple[str, ...] = ()
    prerequisites: Tuple[str, ...] = ()
    success_metrics: Tuple[str, ...] = ()
    common_challenges: Tuple[str, ...] = field(default=())

    @property
    def total_weeks(self) -> int:
        return sum(phase.weeks for phase in self.phases)


_SPANISH = Template(
    id="learn-spanish",
    title="Learn Spanish",
    overview=(
        "Master Spanish through immersive practice, structured grammar learning, "
        "and cultural immersion to achieve conversational fluency"
    ),
    approach=(
        "Progressive methodology combining vocabulary acquisition, grammar mastery, listening "
        "comprehension, speaking practice, and cultural understanding"
    ),
    total_estimated_hours=200,
    difficulty_factors=("Grammar complexity", "Pronunciation variations", "Verb conjugations", "Regional differences"),
    prerequisites=("Basic language learning concepts", "Dedicated practice time", "Access to Spanish media"),
    success_metrics=("Pass DELE B2 level exam", "Sustain 1-hour conversations", "Read Spanish novels", "Write formal emails"),
    common_challenges=(
        "Verb conjugation complexity",
        "Speaking confidence",
        "Listening to rapid speech",
        "Cultural context understanding",
    ),
    phases=(
        PhaseBlueprint(
            title="Spanish Foundations",
            weeks=2,
            description=(
                "Establish fundamental Spanish language skills including pronunciation, basic vocabulary, "
                "and essential phrases for daily communication"
            ),
            skills_to_learn=(
                "Spanish alphabet and pronunciation",
                "Basic greetings and introductions",
                "Numbers 1-100",
                "Essential everyday vocabulary",
            ),
            learning_objectives=(
                "Pronounce Spanish sounds correctly",
                "Introduce yourself in Spanish",
                "Count and use numbers in context",
            ),
            key_concepts=("Spanish phonetics", "Gender of nouns", "Basic sentence structure", "Formal vs informal address"),
            daily_activities=(
                "Pronunciation practice with audio",
                "Vocabulary flashcards (50 new words/week)",
                "Practice greetings and introductions",
            ),
            resources=("Spanish pronunciation guide", "Basic vocabulary app", "Beginner audio lessons"),
            milestones=("Master Spanish pronunciation", "Learn 100 essential words"),
        ),
        PhaseBlueprint(
            title="Essential Grammar",
            weeks=2,
            description=(
                "Master fundamental Spanish grammar including present tense verbs, articles, "
                "and basic sentence construction"
            ),
            skills_to_learn=(
                "Present tense conjugation",
                "Definite and indefinite articles",
                "Adjective agreement",
                "Question formation",
            ),
            learning_objectives=(
                "Conjugate regular verbs in present tense",
                "Use articles correctly with nouns",
                "Form basic questions and statements",
            ),
            key_concepts=("Verb conjugation patterns", "Noun-adjective agreement", "Ser vs estar usage"),
            daily_activities=("Conjugation practice exercises", "Sentence construction drills"),
            resources=("Spanish grammar workbook", "Conjugation practice app"),
            milestones=("Conjugate 20 common verbs", "Describe yourself and family"),
        ),
        PhaseBlueprint(
            title="Everyday Conversations",
            weeks=2,
            description=(
                "Develop practical conversation skills for common daily situations including shopping, "
                "dining, and social interactions"
            ),
            skills_to_learn=("Restaurant ordering", "Shopping vocabulary", "Asking for directions", "Making appointments"),
            learning_objectives=("Order food in Spanish restaurants", "Navigate using Spanish directions"),
            key_concepts=("Polite expressions and courtesy", "Indirect object pronouns", "Present progressive tense"),
            daily_activities=("Role-play restaurant scenarios", "Listen to native conversations", "Record speaking practice"),
            resources=("Conversation practice videos", "Cultural etiquette guide"),
            milestones=("Complete 5-minute restaurant interaction", "Ask and give directions"),
        ),
        PhaseBlueprint(
            title="Intermediate Structures",
            weeks=2,
            description=(
                "Advance to complex grammar including past tenses, subjunctive mood introduction, "
                "and sophisticated sentence structures"
            ),
            skills_to_learn=("Preterite and imperfect tenses", "Subjunctive mood basics", "Idiomatic expressions"),
            learning_objectives=("Narrate past events accurately", "Express opinions and emotions"),
            key_concepts=("Preterite vs imperfect usage", "Subjunctive triggers", "Register and formality levels"),
            daily_activities=("Past tense storytelling", "Idiom memorization", "Complex text reading"),
            resources=("Intermediate grammar guide", "Spanish news articles", "Idiom dictionary"),
            milestones=("Tell complete stories in past tense", "Understand intermediate texts"),
        ),
        PhaseBlueprint(
            title="Fluency Building",
            weeks=2,
            description=(
                "Achieve conversational fluency through advanced grammar, extensive vocabulary, "
                "and natural expression patterns"
            ),
            skills_to_learn=("Advanced subjunctive uses", "Sophisticated vocabulary", "Natural speech patterns"),
            learning_objectives=("Engage in hour-long conversations", "Understand rapid native speech"),
            key_concepts=("Conditional perfect tenses", "Stylistic language variations", "Discourse markers"),
            daily_activities=("Extended conversation practice", "Advanced listening exercises", "Debate and discussion"),
            resources=("Advanced conversation groups", "Spanish podcasts and news", "Literature excerpts"),
            milestones=("Sustain 30-minute conversations", "Understand TV shows without subtitles"),
        ),
        PhaseBlueprint(
            title="Advanced Practice",
            weeks=2,
            description=(
                "Refine language skills to near-native level with focus on regional variations, "
                "professional communication, and cultural nuances"
            ),
            skills_to_learn=("Regional dialect differences", "Professional terminology", "Academic writing"),
            learning_objectives=("Communicate professionally in Spanish", "Write formal documents"),
            key_concepts=("Dialectal variations across regions", "Academic and formal registers"),
            daily_activities=("Professional presentation practice", "Formal writing assignments"),
            resources=("Regional accent training", "Business Spanish course", "Academic writing guide"),
            milestones=("Give professional presentations", "Write formal business letters"),
        ),
    ),
)

_PYTHON = Template(
    id="learn-python",
    title="Learn Python",
    overview=(
        "Master Python programming from complete beginner to building real-world applications "
        "with professional development practices"
    ),
    approach=(
        "Project-based learning with hands-on coding, theoretical understanding, "
        "and practical application development"
    ),
    total_estimated_hours=180,
    difficulty_factors=("Abstract programming concepts", "Problem-solving logic", "Debugging skills"),
    prerequisites=("Basic computer literacy", "Logical thinking skills", "Access to computer and internet"),
    success_metrics=("Build complete web application", "Write well-tested code", "Deploy to production"),
    common_challenges=("Understanding OOP concepts", "Debugging logical errors", "Managing project complexity"),
    phases=(
        PhaseBlueprint(
            title="Python Fundamentals",
            weeks=2,
            description=(
                "Establish core Python programming skills including syntax, data types, variables, "
                "and basic program flow control"
            ),
            skills_to_learn=("Python syntax and indentation", "Variables and data types", "Input/output operations"),
            learning_objectives=("Write simple Python programs", "Handle user input and output"),
            key_concepts=("Python interpreter", "Dynamic typing", "Indentation significance"),
            daily_activities=("Write 5 small programs daily", "Practice syntax exercises", "Debug simple errors"),
            resources=("Python official tutorial", "Interactive coding platform"),
            milestones=("Create calculator program", "Build simple guessing game"),
        ),
        PhaseBlueprint(
            title="Control Flow & Functions",
            weeks=2,
            description=(
                "Master program control structures including loops, conditionals, and function creation "
                "for code organization"
            ),
            skills_to_learn=("If/else statements", "For and while loops", "Function definition and calling"),
            learning_objectives=("Create complex program logic", "Write reusable functions"),
            key_concepts=("Boolean logic", "Loop iteration", "Function scope"),
            daily_activities=("Algorithm implementation", "Function writing practice", "Logic puzzle solving"),
            resources=("Algorithm visualization tools", "Logic puzzle collections"),
            milestones=("Build text-based adventure game", "Solve 20 coding challenges"),
        ),
        PhaseBlueprint(
            title="Data Structures",
            weeks=2,
            description=(
                "Learn to work with Python's built-in data structures and implement basic algorithms "
                "for data manipulation"
            ),
            skills_to_learn=("Lists and list comprehensions", "Dictionaries and sets", "File handling"),
            learning_objectives=("Manipulate complex data sets", "Process text files"),
            key_concepts=("Mutable vs immutable types", "List comprehension syntax", "File I/O operations"),
            daily_activities=("Data processing exercises", "File manipulation tasks"),
            resources=("Data structure visualization", "Real dataset examples"),
            milestones=("Build contact management system", "Process CSV files"),
        ),
        PhaseBlueprint(
            title="Object-Oriented Programming",
            weeks=2,
            description=(
                "Master object-oriented programming concepts including classes, inheritance, "
                "and design patterns"
            ),
            skills_to_learn=("Class definition and instantiation", "Inheritance and polymorphism", "Design patterns"),
            learning_objectives=("Design class hierarchies", "Apply OOP principles"),
            key_concepts=("Class vs instance attributes", "Method overriding", "Composition vs inheritance"),
            daily_activities=("Class design exercises", "Design pattern implementation"),
            resources=("OOP design guide", "Design pattern examples"),
            milestones=("Build inventory management system", "Implement design patterns"),
        ),
        PhaseBlueprint(
            title="Web Development Basics",
            weeks=2,
            description="Introduction to web development using Python frameworks and API integration",
            skills_to_learn=("Flask framework basics", "HTTP request handling", "API consumption"),
            learning_objectives=("Build simple web applications", "Integrate external APIs"),
            key_concepts=("HTTP protocol basics", "Template engines", "RESTful API principles"),
            daily_activities=("Web app development", "API integration practice"),
            resources=("Flask documentation", "API documentation examples"),
            milestones=("Create personal portfolio website", "Build REST API"),
        ),
        PhaseBlueprint(
            title="Advanced Topics",
            weeks=2,
            description="Explore advanced Python concepts including testing, debugging, and deployment practices",
            skills_to_learn=("Unit testing with pytest", "Debugging techniques", "Package management"),
            learning_objectives=("Write comprehensive tests", "Deploy applications"),
            key_concepts=("Test-driven development", "Virtual environments", "Production deployment"),
            daily_activities=("Test writing practice", "Package creation", "Deployment tutorials"),
            resources=("Testing framework docs", "Deployment platforms"),
            milestones=("Create tested Python package", "Deploy web application"),
        ),
    ),
)

_FITNESS = Template(
    id="get-fit",
    title="Get Fit",
    overview="Master your fitness through progressive training and healthy habits",
    approach="Balanced approach with strength, cardio, flexibility, and nutrition",
    total_estimated_hours=120,
    prerequisites=("Medical clearance for exercise", "Comfortable training shoes"),
    success_metrics=("Complete a 5k run", "Perform 20 consecutive push-ups", "Train 4 days a week for a month"),
    common_challenges=("Staying consistent", "Recovering between sessions"),
    phases=(
        PhaseBlueprint(
            title="Foundation Building",
            weeks=2,
            description="Learn basic movements and proper form while forming the training habit",
            skills_to_learn=("Squat and hinge patterns", "Warm-up routines"),
            daily_activities=("20-minute mobility flow", "Bodyweight form practice"),
            milestones=("Train 3 days in a week",),
        ),
        PhaseBlueprint(
            title="Strength Basics",
            weeks=2,
            description="Build base strength with bodyweight exercises and light weights",
            skills_to_learn=("Push-up progression", "Goblet squats", "Rows"),
            daily_activities=("Full-body strength circuit",),
            milestones=("Complete 3 sets of 10 push-ups",),
        ),
        PhaseBlueprint(
            title="Cardio Integration",
            weeks=2,
            description="Build endurance and introduce interval training",
            skills_to_learn=("Run/walk intervals", "Heart-rate zones"),
            daily_activities=("Interval run", "Brisk walk"),
            milestones=("Run 20 minutes without stopping",),
        ),
        PhaseBlueprint(
            title="Progressive Overload",
            weeks=2,
            description="Increase intensity with compound movements and tracked progression",
            skills_to_learn=("Deadlift basics", "Training log discipline"),
            daily_activities=("Compound lift session", "Progress logging"),
            milestones=("Add 10% load to main lifts",),
        ),
        PhaseBlueprint(
            title="Advanced Training",
            weeks=2,
            description="Split routines and specialized techniques for continued progress",
            skills_to_learn=("Upper/lower split", "Tempo training"),
            daily_activities=("Split routine session",),
            milestones=("Follow a full split week",),
        ),
        PhaseBlueprint(
            title="Lifestyle Integration",
            weeks=2,
            description="Maintenance routines and long-term habits that keep fitness sustainable",
            skills_to_learn=("Program design", "Recovery planning"),
            daily_activities=("Self-designed workout", "Weekly review"),
            milestones=("Write your own 4-week program",),
        ),
    ),
)

_GUITAR = Template(
    id="learn-guitar",
    title="Learn Guitar",
    overview="Master guitar playing from complete beginner to confident performer",
    approach="Progressive skill building through chords, techniques, and songs",
    total_estimated_hours=150,
    prerequisites=("A tuned guitar", "Metronome app"),
    success_metrics=("Play five complete songs", "Change chords cleanly at 80 BPM"),
    common_challenges=("Finger soreness", "Clean chord transitions"),
    phases=(
        PhaseBlueprint(
            title="Guitar Fundamentals",
            weeks=2,
            description="Holding the guitar, tuning, and the first basic chords",
            skills_to_learn=("Tuning by ear and app", "E minor and G chords"),
            daily_activities=("Chord shape drills",),
            milestones=("Tune the guitar unaided",),
        ),
        PhaseBlueprint(
            title="Chord Mastery",
            weeks=2,
            description="Open chords, transitions, and basic strumming",
            skills_to_learn=("Open chords", "One-minute chord changes"),
            daily_activities=("Chord transition drills",),
            milestones=("Switch G-C-D cleanly",),
        ),
        PhaseBlueprint(
            title="Rhythm & Timing",
            weeks=2,
            description="Strumming patterns, tempo control, and rhythm",
            skills_to_learn=("Down-up strumming", "Metronome practice"),
            daily_activities=("Strumming pattern loops",),
            milestones=("Hold a pattern at 80 BPM",),
        ),
        PhaseBlueprint(
            title="Lead Techniques",
            weeks=2,
            description="Scales, single-note lines, and first solos",
            skills_to_learn=("Minor pentatonic scale", "Hammer-ons and pull-offs"),
            daily_activities=("Scale runs",),
            milestones=("Play a 12-bar blues solo",),
        ),
        PhaseBlueprint(
            title="Song Repertoire",
            weeks=2,
            description="Complete songs and performance skills",
            skills_to_learn=("Song structure", "Playing along with recordings"),
            daily_activities=("Full song run-through",),
            milestones=("Perform three songs start to finish",),
        ),
        PhaseBlueprint(
            title="Advanced Styles",
            weeks=2,
            description="Fingerpicking, barre chords, and new genres",
            skills_to_learn=("Travis picking", "F and B barre chords"),
            daily_activities=("Fingerpicking etudes",),
            milestones=("Play a barre-chord song",),
        ),
    ),
)

_PUBLIC_SPEAKING = Template(
    id="public-speaking",
    title="Public Speaking",
    overview="Master confident public speaking skills for any audience or occasion",
    approach="Practice-based learning with techniques for preparation, delivery, and engagement",
    total_estimated_hours=90,
    success_metrics=("Deliver a 10-minute talk", "Handle live Q&A calmly"),
    common_challenges=("Stage fright", "Filler words"),
    phases=(
        PhaseBlueprint(
            title="Speaking Foundations",
            weeks=2,
            description="Overcoming fear and learning basic talk structure",
            skills_to_learn=("Breathing techniques", "Three-part talk structure"),
            daily_activities=("Record a 2-minute talk",),
            milestones=("Give a 3-minute talk to a friend",),
        ),
        PhaseBlueprint(
            title="Voice & Presence",
            weeks=2,
            description="Vocal techniques and body language",
            skills_to_learn=("Vocal variety", "Purposeful gestures"),
            daily_activities=("Mirror delivery practice",),
            milestones=("Cut filler words by half",),
        ),
        PhaseBlueprint(
            title="Content Creation",
            weeks=2,
            description="Speech writing and storytelling",
            skills_to_learn=("Story arcs", "Strong openings"),
            daily_activities=("Outline a talk",),
            milestones=("Write a complete 5-minute talk",),
        ),
        PhaseBlueprint(
            title="Audience Engagement",
            weeks=2,
            description="Interaction, Q&A, and reading the room",
            skills_to_learn=("Handling questions", "Audience interaction"),
            daily_activities=("Mock Q&A session",),
            milestones=("Field five live questions",),
        ),
        PhaseBlueprint(
            title="Advanced Delivery",
            weeks=2,
            description="Persuasion, improvisation, and humor",
            skills_to_learn=("Persuasive framing", "Impromptu speaking"),
            daily_activities=("Table-topics drill",),
            milestones=("Deliver an impromptu 2-minute talk",),
        ),
        PhaseBlueprint(
            title="Professional Speaking",
            weeks=2,
            description="Presentations, pitches, and keynotes",
            skills_to_learn=("Slide design", "Pitch structure"),
            daily_activities=("Full presentation rehearsal",),
            milestones=("Present a 10-minute talk to a group",),
        ),
    ),
)

# Keys are topic phrases matched as substrings of the normalized goal title.
# Insertion order is the matching order.
TEMPLATE_CATALOG: Mapping[str, Template] = MappingProxyType(
    {
        "learn spanish": _SPANISH,
        "learn python": _PYTHON,
        "get fit": _FITNESS,
        "learn guitar": _GUITAR,
        "public speaking": _PUBLIC_SPEAKING,
    }
)
