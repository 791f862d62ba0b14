"""Mailers."""

from .post_mailer import PostDigest, PostMailer
