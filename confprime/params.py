# **************************************************
# Text shown to participants.
#
# Screens are plain text; the task templates
# lay these out on the console.
# **************************************************

consent_title = 'Welcome to the experiment'

consent_paras = [
    'Thank you for choosing to take part in our study! The session should'
    ' take 15-20 minutes to complete.',
    'This experiment is part of a research project conducted at'
    ' The University of Edinburgh, and has been approved by the'
    ' Linguistics and English Language Ethics Committee.',
    'Please read the study information letter (InfoConsent.pdf),'
    ' which provides further information about the study.',
    'Continuing indicates that:',
    '- You have downloaded and read the information letter',
    '- You voluntarily agree to participate.',
]

consent_button = 'Yes, I consent to participate'

instructions_paras = [
    'This is an interactive partner-based task. During the experiment,'
    ' you will alternate between describing pictures to your partner and'
    ' matching pictures your partner describes to you.',
    'When it is your turn to describe, you will see two pictures, one of'
    ' which will be highlighted with a green box. You should describe the'
    ' picture highlighted in the green box to your partner using the given'
    ' word. Remember that your partner sees the same two pictures, but they'
    ' may not be in the same positions (left/right).',
    'When it is your turn to match, simply choose the picture your partner'
    ' describes to you.',
]

waiting_room_msg = 'Waiting for partner to join...'
partner_typing_msg = 'Waiting for partner...'
partner_selecting_msg = 'Waiting for your partner to select...'

selection_instruction = 'Choose the picture your partner described'
description_instruction = \
    'Describe the picture in the green box using the given word'

thoughts_on_partner = \
    'Congratulations! You have reached the end of the experiment.' \
    ' Do you have any thoughts on the performance of your partner?'

final_paras = [
    'Thank you for participating!',
    'Your data was saved to the server trial by trial.',
]
