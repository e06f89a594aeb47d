"""Constants for the widget package."""

from chronos_guru.core.constants import AUTO_LANGUAGE, LANGUAGE_NAMES

MAX_INPUT_LENGTH = 1000  # max length of user input string in characters
MAX_TTL_SECONDS = 24 * 3600  # 24 hours

LANGUAGE_CHOICES = [(name, code) for code, name in LANGUAGE_NAMES.items()] + [
    ("Figure's native language", AUTO_LANGUAGE)
]

LANDING_MD = """
## Talk to history

Enter the name of any historical figure to start a conversation. Invite
others to turn it into a cross-era debate, then test what you learned with
a short quiz.
"""

RESET_CONFIRM_JS = """
() => {
  if (!confirm("Reset your journey? Points, badges and figures learned will be cleared.")) {
    throw new Error("reset cancelled");
  }
}
"""

USER_FRIENDLY_EXC = (
    "Whoa...something went sideways."
    " Our engineers have been alerted and are investigating.\n"
    "Please try again in a moment."
)

QUIZ_FAILED_ALERT = "Failed to generate quiz. Please try again."

# Plays speech cues in order in the browser. Hosted audio goes through an
# <audio> element; native cues go through speechSynthesis with the same
# locale -> voice preference the server uses (exact, prefix, Google, first).
PLAY_CUES_JS = """
async (payload) => {
  const w = window;
  w.__chronos = w.__chronos || { token: 0, audio: null };
  const st = w.__chronos;
  const halt = () => {
    st.token += 1;
    if (st.audio) { st.audio.pause(); st.audio = null; }
    if (w.speechSynthesis) { w.speechSynthesis.cancel(); }
  };
  if (!payload) { return; }
  if (payload.stop) { halt(); }
  const cues = payload.cues || [];
  if (!cues.length) { return; }
  const token = st.token;
  st.chain = (st.chain || Promise.resolve()).then(async () => {
    for (const cue of cues) {
      if (token !== st.token) { return; }
      if (cue.kind === "audio" && cue.audioData) {
        await new Promise((resolve) => {
          const audio = new Audio(`data:${cue.mimeType};base64,${cue.audioData}`);
          st.audio = audio;
          audio.onended = resolve;
          audio.onerror = resolve;
          audio.play().catch(resolve);
        });
        continue;
      }
      if (!w.speechSynthesis) { continue; }
      await new Promise((resolve) => {
        const u = new SpeechSynthesisUtterance(cue.text);
        const target = (cue.locale || "en-US").toLowerCase();
        const prefix = target.slice(0, 2);
        const voices = w.speechSynthesis.getVoices();
        const lang = (v) => (v.lang || "").toLowerCase();
        const voice = voices.find((v) => cue.voice && v.name === cue.voice)
          || voices.find((v) => lang(v) === target)
          || voices.find((v) => lang(v).startsWith(prefix))
          || voices.find((v) => v.name.toLowerCase().includes("google") && lang(v).startsWith(prefix))
          || voices[0];
        if (voice) { u.voice = voice; }
        u.lang = cue.locale || "en-US";
        u.rate = cue.rate || 1.0;
        u.onend = resolve;
        u.onerror = resolve;
        w.speechSynthesis.speak(u);
      });
    }
  });
}
"""

# Starts browser speech recognition and forwards every result event, as
# JSON, to the hidden dictation textbox.
DICTATE_JS = """
() => {
  const Rec = window.SpeechRecognition || window.webkitSpeechRecognition;
  if (!Rec) { alert("Speech recognition is not supported in this browser."); return; }
  const box = document.querySelector("#dictation-events textarea");
  if (!box) { return; }
  const rec = new Rec();
  rec.interimResults = true;
  rec.continuous = false;
  rec.onresult = (event) => {
    const results = [];
    for (let i = 0; i < event.results.length; i++) {
      results.push({ transcript: event.results[i][0].transcript, isFinal: event.results[i].isFinal });
    }
    box.value = JSON.stringify({ results: results, resultIndex: event.resultIndex });
    box.dispatchEvent(new Event("input", { bubbles: true }));
  };
  rec.start();
}
"""
