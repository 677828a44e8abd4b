from typing import Any, Dict, List

BARBELL = "Barbell"
DUMBBELL = "Dumbbell"
BODYWEIGHT = "Bodyweight"
MACHINE = "Machine"
CARDIO = "Cardio"
CORE = "Core"
MOBILITY = "Mobility"

CATEGORIES = [BARBELL, DUMBBELL, BODYWEIGHT, MACHINE, CARDIO, CORE, MOBILITY]


def _ex(name: str, category: str, muscles: str, equipment: str, sets: int, reps: int,
        cues: List[str], is_timed: bool = False) -> Dict[str, Any]:
    return {
        "name": name,
        "category": category,
        "muscles": muscles,
        "equipment": equipment,
        "default_sets": sets,
        "default_reps": reps,
        "is_timed": is_timed,
        "demo_video_url": "",
        "cues": cues,
    }


# Seeded into an empty exercises table; timed entries store seconds/minutes in default_reps.
DEFAULT_EXERCISES: List[Dict[str, Any]] = [
    _ex("Barbell Back Squat", BARBELL, "Quadriceps, Glutes, Hamstrings", "Barbell, Rack", 4, 8, [
        "Place bar on upper traps",
        "Feet shoulder-width apart",
        "Push knees out as you descend",
        "Keep chest up and core braced",
        "Drive through heels to stand",
    ]),
    _ex("Barbell Deadlift", BARBELL, "Hamstrings, Glutes, Lower Back, Traps", "Barbell", 3, 6, [
        "Bar over mid-foot",
        "Grip just outside legs",
        "Engage lats, chest up",
        "Push floor away with legs",
        "Lock out hips at top",
    ]),
    _ex("Barbell Bench Press", BARBELL, "Chest, Triceps, Shoulders", "Barbell, Bench", 4, 8, [
        "Retract shoulder blades",
        "Grip slightly wider than shoulders",
        "Lower bar to mid-chest",
        "Press up and slightly back",
        "Keep elbows at 45 degrees",
    ]),
    _ex("Barbell Overhead Press", BARBELL, "Shoulders, Triceps, Upper Chest", "Barbell", 4, 8, [
        "Bar at collarbone level",
        "Grip just outside shoulders",
        "Brace core tightly",
        "Press straight up",
        "Shrug at top for lockout",
    ]),
    _ex("Barbell Row", BARBELL, "Upper Back, Lats, Biceps", "Barbell", 4, 10, [
        "Hinge at hips, torso parallel to floor",
        "Pull bar to lower chest/upper abdomen",
        "Squeeze shoulder blades together",
        "Keep elbows close to body",
        "Control descent",
    ]),
    _ex("Dumbbell Goblet Squat", DUMBBELL, "Quadriceps, Glutes", "Dumbbell", 3, 12, [
        "Hold dumbbell at chest",
        "Elbows between knees",
        "Squat deep",
        "Keep torso upright",
        "Drive through heels",
    ]),
    _ex("Dumbbell Lunges", DUMBBELL, "Quadriceps, Glutes, Hamstrings", "Dumbbells", 3, 10, [
        "Hold dumbbells at sides",
        "Step forward into lunge",
        "Back knee nearly touches ground",
        "Keep torso upright",
        "Push through front heel",
    ]),
    _ex("Dumbbell Shoulder Press", DUMBBELL, "Shoulders, Triceps", "Dumbbells", 3, 10, [
        "Start at shoulder height",
        "Press up and slightly in",
        "Avoid arching back",
        "Control the descent",
        "Keep core tight",
    ]),
    _ex("Dumbbell Romanian Deadlift", DUMBBELL, "Hamstrings, Glutes, Lower Back", "Dumbbells", 3, 12, [
        "Hold dumbbells in front of thighs",
        "Hinge at hips, slight knee bend",
        "Keep back flat",
        "Lower until hamstring stretch",
        "Drive hips forward to return",
    ]),
    _ex("Push-ups", BODYWEIGHT, "Chest, Triceps, Shoulders", "None", 3, 15, [
        "Hands shoulder-width apart",
        "Body in straight line",
        "Lower chest to floor",
        "Push back up",
        "Keep core engaged",
    ]),
    _ex("Pull-ups", BODYWEIGHT, "Lats, Biceps, Upper Back", "Pull-up Bar", 3, 8, [
        "Hang from bar, hands shoulder-width",
        "Pull chest to bar",
        "Squeeze shoulder blades",
        "Control descent",
        "Full arm extension at bottom",
    ]),
    _ex("Bodyweight Squats", BODYWEIGHT, "Quadriceps, Glutes", "None", 3, 20, [
        "Feet shoulder-width apart",
        "Arms forward for balance",
        "Squat until thighs parallel",
        "Keep chest up",
        "Drive through heels",
    ]),
    _ex("Plank", CORE, "Core, Abs, Lower Back", "None", 3, 60, [
        "Forearms on ground",
        "Body in straight line",
        "Engage core and glutes",
        "Hold position",
        "Breathe steadily",
    ], is_timed=True),
    _ex("Hanging Leg Raises", CORE, "Lower Abs, Hip Flexors", "Pull-up Bar", 3, 12, [
        "Hang from bar",
        "Raise legs to 90 degrees",
        "Control the movement",
        "Avoid swinging",
        "Lower with control",
    ]),
    _ex("Lat Pulldown", MACHINE, "Lats, Biceps, Upper Back", "Cable Machine", 3, 12, [
        "Grip bar wider than shoulders",
        "Pull bar to upper chest",
        "Squeeze lats at bottom",
        "Keep torso upright",
        "Control the return",
    ]),
    _ex("Leg Press", MACHINE, "Quadriceps, Glutes, Hamstrings", "Leg Press Machine", 3, 12, [
        "Feet shoulder-width on platform",
        "Lower until 90-degree knee bend",
        "Push through heels",
        "Avoid locking knees",
        "Control the descent",
    ]),
    _ex("Running", CARDIO, "Full Body Cardio", "Treadmill or Outdoors", 1, 30, [
        "Maintain steady pace",
        "Land mid-foot",
        "Keep shoulders relaxed",
        "Swing arms naturally",
        "Breathe rhythmically",
    ], is_timed=True),
]
